"""
Tests de la détection des clés inutilisées.
"""

from locale_sync.locales.cleaner import find_unused_keys, iter_source_files
from locale_sync.locales.extractor import KeyExtractor


def make_sources(root):
    (root / "src").mkdir(parents=True)
    (root / "src" / "App.tsx").write_text("intl.t('你好')", encoding="utf-8")
    (root / "src" / "util.js").write_text("intl.t('再见', {})", encoding="utf-8")
    (root / "src" / "notes.md").write_text("intl.t('保存')", encoding="utf-8")
    (root / "node_modules" / "lib").mkdir(parents=True)
    (root / "node_modules" / "lib" / "index.js").write_text(
        "intl.t('取消')", encoding="utf-8"
    )


class TestFindUnusedKeys:
    def test_unused_keys_in_baseline_order(self, tmp_path):
        make_sources(tmp_path)
        keys = ["取消", "你好", "保存", "再见"]

        unused = find_unused_keys(keys, tmp_path, KeyExtractor("di18n"))

        # .md et node_modules ne sont pas analysés
        assert unused == ["取消", "保存"]

    def test_all_keys_used(self, tmp_path):
        make_sources(tmp_path)
        assert find_unused_keys(["你好", "再见"], tmp_path, KeyExtractor()) == []

    def test_plain_string_is_not_a_usage(self, tmp_path):
        (tmp_path / "a.ts").write_text("const label = '你好';", encoding="utf-8")
        assert find_unused_keys(["你好"], tmp_path, KeyExtractor()) == ["你好"]

    def test_iter_source_files_excludes_dirs(self, tmp_path):
        make_sources(tmp_path)
        files = sorted(p.name for p in iter_source_files(tmp_path))
        assert files == ["App.tsx", "util.js"]
