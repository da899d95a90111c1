"""Learner provisioning by email."""

import pytest

from tutorbooking.auth import verify_password
from tutorbooking.core.exceptions import ValidationException
from tutorbooking.models.user import User
from tutorbooking.services.identity_resolver import LearnerIdentityResolver, normalize_email


@pytest.fixture
def resolver(db):
    return LearnerIdentityResolver(db)


class TestLearnerIdentityResolver:
    def test_creates_learner_on_first_sight(self, db, resolver):
        learner_id = resolver.resolve_learner("  Ada@Example.COM ", "Ada", "Lovelace")
        db.commit()

        learner = db.get(User, learner_id)
        assert learner.email == "ada@example.com"
        assert learner.first_name == "Ada"
        assert learner.last_name == "Lovelace"
        assert learner.role == "learner"
        assert learner.is_active is True
        assert learner.hashed_password.startswith("$2")

    def test_placeholder_secret_is_not_guessable(self, db, resolver):
        learner = db.get(User, resolver.resolve_learner("grace@example.com"))
        assert not verify_password("", learner.hashed_password)
        assert not verify_password("grace@example.com", learner.hashed_password)

    def test_first_name_defaults_to_email_local_part(self, db, resolver):
        learner = db.get(User, resolver.resolve_learner("grace.hopper@example.com"))
        assert learner.first_name == "grace.hopper"
        assert learner.last_name is None

    def test_same_email_resolves_to_same_learner(self, db, resolver):
        first = resolver.resolve_learner("ada@example.com", "Ada")
        second = resolver.resolve_learner("ADA@example.com")

        assert first == second
        assert db.query(User).filter(User.email == "ada@example.com").count() == 1

    def test_supplied_names_overwrite_existing(self, db, resolver):
        learner_id = resolver.resolve_learner("ada@example.com", "Ada", "Lovelace")
        resolver.resolve_learner("ada@example.com", "Augusta", None)

        learner = db.get(User, learner_id)
        assert learner.first_name == "Augusta"
        assert learner.last_name == "Lovelace"

    def test_blank_names_leave_existing_untouched(self, db, resolver):
        learner_id = resolver.resolve_learner("ada@example.com", "Ada", "Lovelace")
        resolver.resolve_learner("ada@example.com", "   ", "")

        learner = db.get(User, learner_id)
        assert learner.first_name == "Ada"
        assert learner.last_name == "Lovelace"

    @pytest.mark.parametrize("email", [None, "", "   "])
    def test_blank_email_is_rejected(self, resolver, email):
        with pytest.raises(ValidationException) as exc_info:
            resolver.resolve_learner(email)

        assert exc_info.value.code == "LEARNER_EMAIL_REQUIRED"


def test_normalize_email():
    assert normalize_email("  Ada@Example.com\n") == "ada@example.com"
    assert normalize_email(None) == ""
