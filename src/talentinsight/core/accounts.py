from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from talentinsight.core.identifiers import IdentifierFactory
from talentinsight.core.provisioning import ProvisioningPolicy
from talentinsight.core.runtime import get_provisioning_policy
from talentinsight.db.models import User
from talentinsight.db.repositories import Repository
from talentinsight.db.session import transaction
from talentinsight.errors import ConflictError, InvalidSubmissionError, NotFoundError
from talentinsight.types import UserAccount, validate_email_format

logger = logging.getLogger(__name__)

ROLES = frozenset({"CANDIDATE", "COMPANY", "ADMIN"})


def to_account(user: User) -> UserAccount:
    return UserAccount(id=user.id, full_name=user.full_name, email=user.email, role=user.role)


class AccountService:
    def __init__(
        self,
        session: Session,
        *,
        identifiers: IdentifierFactory | None = None,
        policy: ProvisioningPolicy | None = None,
    ):
        self.session = session
        self.repo = Repository(session)
        self.identifiers = identifiers or IdentifierFactory()
        self.policy = policy or get_provisioning_policy()

    def signup(self, *, full_name: str, email: str, role: str) -> UserAccount:
        if not full_name or not email or not role:
            raise InvalidSubmissionError("Full Name, Email, and Role are required.")
        if role not in ROLES:
            raise InvalidSubmissionError("Invalid role specified.")
        try:
            validate_email_format(email)
        except ValueError as exc:
            raise InvalidSubmissionError(str(exc)) from exc

        try:
            with transaction(self.session):
                user = self.repo.create_user(
                    user_id=self.identifiers.user_id(),
                    full_name=full_name,
                    email=email,
                    role=role,
                )
                if role == "COMPANY":
                    self.repo.create_company_settings(
                        company_id=user.id,
                        company_name=full_name,
                        total_interviews=self.policy.default_total_interviews,
                    )
        except IntegrityError as exc:
            raise ConflictError("This email is already registered.") from exc

        logger.info("Registered %s user %s", role, user.id)
        return to_account(user)

    def login(self, email: str) -> UserAccount:
        if not email:
            raise InvalidSubmissionError("Email is required.")
        user = self.repo.get_user_by_email(email)
        if user is None:
            raise NotFoundError("Invalid email or user not found.")
        return to_account(user)

    def list_users(self, role: str | None = None) -> list[UserAccount]:
        return [to_account(user) for user in self.repo.list_users(role=role)]
