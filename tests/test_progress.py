"""
Tests des implémentations de ProgressReporter.
"""

from locale_sync.progress import RecordingReporter, TqdmReporter


class TestRecordingReporter:
    def test_status_dispose_is_idempotent(self):
        reporter = RecordingReporter()

        dispose = reporter.status("En attente")
        assert reporter.active_statuses == ["En attente"]

        dispose()
        dispose()

        assert reporter.active_statuses == []
        assert reporter.messages("status_end") == ["En attente"]

    def test_messages_by_kind(self):
        reporter = RecordingReporter()
        reporter.info("ok")
        reporter.warning("attention")
        reporter.error("échec")
        reporter.report("en-US", 40)
        reporter.report("fr-FR", 60)

        assert reporter.messages("info") == ["ok"]
        assert reporter.messages("warning") == ["attention"]
        assert reporter.messages("error") == ["échec"]
        assert reporter.total_progress == 100


class TestTqdmReporter:
    def test_bar_is_closed_at_100(self):
        reporter = TqdmReporter(disable=True)

        reporter.report("en-US", 60)
        assert reporter._bar is not None

        # Dépassement borné au total
        reporter.report("fr-FR", 60)
        assert reporter._bar is None

    def test_messages_are_written_above_the_bar(self, capsys):
        reporter = TqdmReporter(disable=True)

        dispose = reporter.status("Traduction en attente")
        reporter.info("Terminé")
        reporter.warning("Lent")
        reporter.error("Échec")
        dispose()
        reporter.close()

        out = capsys.readouterr().out
        assert "⏳ Traduction en attente" in out
        assert "✅ Terminé" in out
        assert "⚠️ Lent" in out
        assert "❌ Échec" in out
