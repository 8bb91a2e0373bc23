from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from talentinsight.core.provisioning import ProvisioningPolicy
from talentinsight.core.runtime import get_provisioning_policy
from talentinsight.db.models import CompanySettings
from talentinsight.db.repositories import Repository
from talentinsight.db.session import transaction
from talentinsight.errors import InvalidSubmissionError, NotFoundError
from talentinsight.types import (
    AttributePreference,
    BinaryAssessment,
    CompanySettingsData,
    CustomQuestion,
    InterviewStageSetting,
)

logger = logging.getLogger(__name__)


class CompanySettingsService:
    """Reads and replaces a company's settings tree.

    Updates are not incremental: attribute preferences, global custom
    questions and interview stages (with their assessments and questions) are
    deleted and reinserted from the submitted tree.
    """

    def __init__(self, session: Session, *, policy: ProvisioningPolicy | None = None):
        self.session = session
        self.repo = Repository(session)
        self.policy = policy or get_provisioning_policy()

    def get_settings(self, company_id: str) -> CompanySettingsData:
        settings = self.load_settings(company_id)
        if settings is not None:
            return settings

        user = self.repo.get_user(company_id)
        if user is None or user.role != "COMPANY":
            raise NotFoundError("Company settings not found and user is not a valid company.")

        with transaction(self.session):
            self.repo.create_company_settings(
                company_id=company_id,
                company_name=self.policy.default_company_name(company_id),
                total_interviews=self.policy.default_total_interviews,
            )
        logger.info("Provisioned default settings for company %s", company_id)
        return self.load_settings(company_id)

    def replace_settings(self, company_id: str, payload: CompanySettingsData) -> CompanySettingsData:
        stage_numbers = [stage.stage_number for stage in payload.interview_stage_settings]
        if len(stage_numbers) != len(set(stage_numbers)):
            raise InvalidSubmissionError("Interview stage numbers must be unique.")

        with transaction(self.session):
            settings = self.repo.get_company_settings(company_id)
            if settings is None:
                user = self.repo.get_user(company_id)
                if user is None or user.role != "COMPANY":
                    raise InvalidSubmissionError("Invalid company ID or user is not a company.")
                settings = self.repo.create_company_settings(
                    company_id=company_id,
                    company_name=payload.company_name or user.full_name or self.policy.default_company_name(company_id),
                    total_interviews=payload.total_interviews or self.policy.default_total_interviews,
                )

            self._apply_scalars(settings, payload)

            preferences = [(item, "personal") for item in payload.personal_attribute_preferences]
            preferences += [(item, "organizational") for item in payload.organizational_attribute_preferences]
            self.repo.replace_attribute_preferences(company_id, preferences)
            self.repo.replace_global_custom_questions(company_id, payload.global_custom_questions)

            self.repo.delete_stage_settings(company_id)
            for stage in payload.interview_stage_settings:
                row = self.repo.create_stage_setting(company_id, stage.stage_number)
                self.repo.replace_binary_assessments(row.stage_setting_id, stage.binary_assessments)
                self.repo.add_stage_custom_questions(row.stage_setting_id, stage.custom_questions)

        logger.info("Replaced settings for company %s", company_id)
        return self.load_settings(company_id)

    def list_all_settings(self) -> list[CompanySettingsData]:
        result: list[CompanySettingsData] = []
        for user in self.repo.list_users(role="COMPANY"):
            settings = self.load_settings(user.id)
            if settings is not None:
                result.append(settings)
        return result

    def load_settings(self, company_id: str) -> CompanySettingsData | None:
        settings = self.repo.get_company_settings(company_id)
        if settings is None:
            return None

        stages = []
        for stage in self.repo.list_stage_settings(company_id):
            stages.append(
                InterviewStageSetting(
                    stage_setting_id=stage.stage_setting_id,
                    stage_number=stage.stage_number,
                    binary_assessments=[
                        BinaryAssessment(category_id=row.category_id, assessed=row.assessed)
                        for row in self.repo.list_binary_assessments(stage.stage_setting_id)
                    ],
                    custom_questions=[
                        CustomQuestion(original_question_id=row.original_question_id, custom_text=row.custom_text)
                        for row in self.repo.list_stage_custom_questions(stage.stage_setting_id)
                    ],
                )
            )

        return CompanySettingsData(
            company_id=settings.company_id,
            company_name=settings.company_name,
            company_size=settings.company_size,
            company_type=settings.company_type,
            company_linked_in=settings.company_linkedin,
            company_website=settings.company_website,
            address=settings.address,
            contact_person_name=settings.contact_person_name,
            contact_person_email=settings.contact_person_email,
            contact_person_designation=settings.contact_person_designation,
            company_phone_number=settings.company_phone_number,
            total_interviews=settings.total_interviews,
            personal_attribute_preferences=self._preferences(company_id, "personal"),
            organizational_attribute_preferences=self._preferences(company_id, "organizational"),
            global_custom_questions=[
                CustomQuestion(original_question_id=row.original_question_id, custom_text=row.custom_text)
                for row in self.repo.list_global_custom_questions(company_id)
            ],
            interview_stage_settings=stages,
        )

    def _preferences(self, company_id: str, attribute_type: str) -> list[AttributePreference]:
        return [
            AttributePreference(category_id=row.category_id, rank=row.rank)
            for row in self.repo.list_attribute_preferences(company_id, attribute_type)
        ]

    def _apply_scalars(self, settings: CompanySettings, payload: CompanySettingsData) -> None:
        settings.company_name = payload.company_name or settings.company_name
        settings.company_size = payload.company_size
        settings.company_type = payload.company_type
        settings.company_linkedin = payload.company_linked_in
        settings.company_website = payload.company_website
        settings.address = payload.address
        settings.contact_person_name = payload.contact_person_name
        settings.contact_person_email = payload.contact_person_email
        settings.contact_person_designation = payload.contact_person_designation
        settings.company_phone_number = payload.company_phone_number
        settings.total_interviews = payload.total_interviews or self.policy.default_total_interviews
        self.session.flush()
