"""
Tests unitaires pour le stockage des fichiers de langue.
"""

import json

import pytest

from locale_sync.errors import StorageError
from locale_sync.locales.store import LocaleStore, find_missing_keys, is_invalid_value


class TestIsInvalidValue:
    @pytest.mark.parametrize("value", [None, "", "   ", '""', "「」", "“”", "'"])
    def test_invalid(self, value):
        assert is_invalid_value(value)

    @pytest.mark.parametrize("value", ["Hello", " Bonjour ", '"Hi"', "0"])
    def test_valid(self, value):
        assert not is_invalid_value(value)

    def test_find_missing_keys(self):
        table = {"a": "A", "b": "", "c": "「」"}
        assert find_missing_keys(["a", "b", "c", "d"], table) == ["b", "c", "d"]


class TestLocaleStore:
    """Tests pour LocaleStore."""

    def test_read_missing_file(self, tmp_path):
        store = LocaleStore(tmp_path)
        assert store.read("en-US") == {}
        assert not store.exists("en-US")

    def test_write_and_read(self, tmp_path):
        store = LocaleStore(tmp_path)
        path = store.write("en-US", {"你好": "Hello", "再见": "Goodbye"})

        assert path == tmp_path / "locales" / "en-US.json"
        assert store.read("en-US") == {"你好": "Hello", "再见": "Goodbye"}

        # UTF-8 lisible et indentation de 2 espaces
        content = path.read_text(encoding="utf-8")
        assert '"你好": "Hello"' in content
        assert content.startswith('{\n  "')

    def test_write_preserves_insertion_order(self, tmp_path):
        store = LocaleStore(tmp_path)
        store.write("en-US", {"b": "B", "a": "A"})
        assert list(store.read("en-US")) == ["b", "a"]

    def test_write_sorted(self, tmp_path):
        store = LocaleStore(tmp_path)
        store.write("en-US", {"b": "B", "a": "A"}, preserve_order=False)
        assert list(store.read("en-US")) == ["a", "b"]

    def test_custom_locales_dir(self, tmp_path):
        store = LocaleStore(tmp_path, "src/i18n")
        store.write("fr-FR", {"a": "A"})
        assert (tmp_path / "src" / "i18n" / "fr-FR.json").exists()

    def test_invalid_json_raises_storage_error(self, tmp_path):
        store = LocaleStore(tmp_path)
        store.directory.mkdir(parents=True)
        store.path_for("en-US").write_text("{oops", encoding="utf-8")

        with pytest.raises(StorageError) as exc_info:
            store.read("en-US")
        assert exc_info.value.path == store.path_for("en-US")

    def test_non_object_json_raises_storage_error(self, tmp_path):
        store = LocaleStore(tmp_path)
        store.directory.mkdir(parents=True)
        store.path_for("en-US").write_text(json.dumps(["a"]), encoding="utf-8")

        with pytest.raises(StorageError):
            store.read("en-US")

    def test_write_failure_raises_storage_error(self, tmp_path):
        # "locales" est un fichier : impossible d'y créer un dossier
        (tmp_path / "locales").write_text("", encoding="utf-8")
        store = LocaleStore(tmp_path)

        with pytest.raises(StorageError):
            store.write("en-US", {"a": "A"})

    def test_merge_is_right_biased_and_keeps_order(self):
        merged = LocaleStore.merge({"a": "1", "b": "2"}, {"c": "3", "a": "4"})
        assert merged == {"a": "4", "b": "2", "c": "3"}
        assert list(merged) == ["a", "b", "c"]

    def test_remove_keys(self, tmp_path):
        store = LocaleStore(tmp_path)
        store.write("en-US", {"a": "A", "b": "B", "c": "C"})

        removed = store.remove_keys("en-US", ["b", "zzz"])

        assert removed == 1
        assert store.read("en-US") == {"a": "A", "c": "C"}
        assert store.remove_keys("fr-FR", ["a"]) == 0
