"""Tests for app.services.sync: compare-and-swap writes and version monotonicity."""

import unittest

from app.core.exceptions import MissingVersion, ValidationError, VersionConflict
from app.models import SyncDocument
from app.models.user import ROLE_USER
from app.services.credentials import create_user
from app.services.sync import read_document, write_document
from tests.support import DatabaseTestCase

CONTACTS = [{"id": "c1", "name": "Mika"}, {"id": "c2", "name": "Rin"}]


class TestReadDocument(DatabaseTestCase):
    def test_new_user_has_empty_document_at_version_zero(self) -> None:
        user = create_user(self.db, "alice", "secret1", ROLE_USER)
        snapshot = read_document(self.db, user.id)
        self.assertEqual(snapshot.version, 0)
        self.assertEqual(snapshot.contacts, [])
        self.assertEqual(snapshot.world_books, [])
        self.assertEqual(snapshot.user_persona_presets, [])
        self.assertEqual(snapshot.thought_presets, [])
        self.assertEqual(snapshot.my_profile, {})

    def test_missing_document_reads_as_empty_default(self) -> None:
        snapshot = read_document(self.db, 12345)
        self.assertEqual(snapshot.version, 0)
        self.assertEqual(snapshot.contacts, [])
        self.assertEqual(snapshot.my_profile, {})


class TestWriteDocument(DatabaseTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user = create_user(self.db, "alice", "secret1", ROLE_USER)

    def test_write_returns_next_version_and_is_readable(self) -> None:
        new_version = write_document(self.db, self.user.id, {"contacts": CONTACTS}, 0)
        self.assertEqual(new_version, 1)
        snapshot = read_document(self.db, self.user.id)
        self.assertEqual(snapshot.version, 1)
        self.assertEqual(snapshot.contacts, CONTACTS)

    def test_versions_increase_by_exactly_one(self) -> None:
        version = 0
        for i in range(5):
            version = write_document(
                self.db, self.user.id, {"my_profile": {"name": f"n{i}"}}, version
            )
            self.assertEqual(version, i + 1)
            self.assertEqual(read_document(self.db, self.user.id).version, i + 1)

    def test_stale_write_conflicts_with_server_version(self) -> None:
        write_document(self.db, self.user.id, {"contacts": CONTACTS}, 0)
        with self.assertRaises(VersionConflict) as ctx:
            write_document(self.db, self.user.id, {"contacts": []}, 0)
        self.assertEqual(ctx.exception.server_version, 1)
        snapshot = read_document(self.db, self.user.id)
        self.assertEqual(snapshot.version, 1)
        self.assertEqual(snapshot.contacts, CONTACTS)

    def test_future_version_conflicts(self) -> None:
        with self.assertRaises(VersionConflict) as ctx:
            write_document(self.db, self.user.id, {"contacts": CONTACTS}, 7)
        self.assertEqual(ctx.exception.server_version, 0)
        self.assertEqual(read_document(self.db, self.user.id).contacts, [])

    def test_out_of_range_version_conflicts_without_writing(self) -> None:
        write_document(self.db, self.user.id, {"contacts": CONTACTS}, 0)
        for version in (2**70, -1, -(2**70)):
            with self.subTest(version=version):
                with self.assertRaises(VersionConflict) as ctx:
                    write_document(self.db, self.user.id, {"contacts": []}, version)
                self.assertEqual(ctx.exception.server_version, 1)
        snapshot = read_document(self.db, self.user.id)
        self.assertEqual(snapshot.version, 1)
        self.assertEqual(snapshot.contacts, CONTACTS)

    def test_two_writers_same_base_first_wins(self) -> None:
        device_a = self.Session()
        device_b = self.Session()
        try:
            winner = write_document(device_a, self.user.id, {"contacts": [{"id": "a"}]}, 0)
            with self.assertRaises(VersionConflict) as ctx:
                write_document(device_b, self.user.id, {"contacts": [{"id": "b"}]}, 0)
        finally:
            device_a.close()
            device_b.close()
        self.assertEqual(winner, 1)
        self.assertEqual(ctx.exception.server_version, winner)
        self.assertEqual(read_document(self.db, self.user.id).contacts, [{"id": "a"}])

    def test_loser_can_retry_against_fresh_version(self) -> None:
        write_document(self.db, self.user.id, {"contacts": [{"id": "a"}]}, 0)
        with self.assertRaises(VersionConflict) as ctx:
            write_document(self.db, self.user.id, {"contacts": [{"id": "b"}]}, 0)
        retried = write_document(
            self.db, self.user.id, {"contacts": [{"id": "a"}, {"id": "b"}]}, ctx.exception.server_version
        )
        self.assertEqual(retried, 2)

    def test_partial_write_keeps_other_sections(self) -> None:
        write_document(
            self.db,
            self.user.id,
            {"contacts": CONTACTS, "world_books": [{"id": "w1"}], "my_profile": {"name": "A"}},
            0,
        )
        write_document(self.db, self.user.id, {"thought_presets": [{"id": "t1"}]}, 1)
        snapshot = read_document(self.db, self.user.id)
        self.assertEqual(snapshot.version, 2)
        self.assertEqual(snapshot.contacts, CONTACTS)
        self.assertEqual(snapshot.world_books, [{"id": "w1"}])
        self.assertEqual(snapshot.thought_presets, [{"id": "t1"}])
        self.assertEqual(snapshot.my_profile, {"name": "A"})

    def test_empty_write_still_bumps_version(self) -> None:
        self.assertEqual(write_document(self.db, self.user.id, {}, 0), 1)
        self.assertEqual(read_document(self.db, self.user.id).version, 1)

    def test_missing_version(self) -> None:
        with self.assertRaises(MissingVersion):
            write_document(self.db, self.user.id, {"contacts": CONTACTS}, None)
        self.assertEqual(read_document(self.db, self.user.id).version, 0)

    def test_rejects_unknown_or_mistyped_sections(self) -> None:
        with self.assertRaises(ValidationError):
            write_document(self.db, self.user.id, {"password_hash": "x"}, 0)
        with self.assertRaises(ValidationError):
            write_document(self.db, self.user.id, {"contacts": {"not": "a list"}}, 0)
        with self.assertRaises(ValidationError):
            write_document(self.db, self.user.id, {"my_profile": ["not", "an", "object"]}, 0)
        self.assertEqual(read_document(self.db, self.user.id).version, 0)

    def test_write_recreates_missing_document(self) -> None:
        self.db.query(SyncDocument).filter(SyncDocument.user_id == self.user.id).delete()
        self.db.commit()
        self.assertEqual(write_document(self.db, self.user.id, {"contacts": CONTACTS}, 0), 1)
        self.assertEqual(read_document(self.db, self.user.id).contacts, CONTACTS)

    def test_documents_are_per_user(self) -> None:
        other = create_user(self.db, "bob", "secret1", ROLE_USER)
        write_document(self.db, self.user.id, {"contacts": CONTACTS}, 0)
        self.assertEqual(read_document(self.db, other.id).version, 0)
        self.assertEqual(write_document(self.db, other.id, {}, 0), 1)


if __name__ == "__main__":
    unittest.main()
