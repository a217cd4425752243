import threading

import pytest

from photoshape.security.path_guard import validate_segment
from photoshape.storage.local import delete_session_files, save_session_file, session_folder_id


class TestValidateSegment:
    @pytest.mark.parametrize("raw", ["sess_abcd123", "a-b.c", "X9"])
    def test_accepts_plain_ids(self, raw):
        assert validate_segment(raw) == raw

    @pytest.mark.parametrize("raw", ["alice/1", "../etc", "..", ".", "", "a b", "sess\\1"])
    def test_rejects_ids_that_would_need_rewriting(self, raw):
        with pytest.raises(ValueError):
            validate_segment(raw)

    def test_distinct_ids_never_share_a_folder(self):
        with pytest.raises(ValueError):
            session_folder_id("alice/1")
        assert session_folder_id("alice_1") == "customizer/alice_1"


class TestSaveSessionFile:
    def test_replaces_existing_file(self, storage_root):
        save_session_file("sess", "circle.png", b"first")
        stored = save_session_file("sess", "circle.png", b"second")
        assert stored.path.read_bytes() == b"second"
        assert sorted(p.name for p in stored.path.parent.iterdir()) == ["circle.png"]

    def test_concurrent_writers_do_not_collide(self, storage_root):
        payloads = [bytes([i]) * 200_000 for i in range(6)]
        errors = []

        def writer(payload):
            try:
                for _ in range(10):
                    save_session_file("sess", "circle.png", payload)
            except Exception as exc:  # noqa: BLE001 - collected for the assertion below
                errors.append(exc)

        threads = [threading.Thread(target=writer, args=(p,)) for p in payloads]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        folder = storage_root / "customizer" / "sess"
        assert sorted(p.name for p in folder.iterdir()) == ["circle.png"]
        assert (folder / "circle.png").read_bytes() in payloads

    def test_delete_counts_files(self, storage_root):
        save_session_file("sess", "original.png", b"a")
        save_session_file("sess", "heart.png", b"b")
        assert delete_session_files("sess") == 2
        assert not (storage_root / "customizer" / "sess").exists()
        assert delete_session_files("sess") == 0
