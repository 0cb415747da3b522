"""Service settings for coreiq-scorer.

Values load from the environment using the COREIQ_ prefix, e.g.
``COREIQ_DEFAULT_ACTIVE_FUNCTIONS='["OPS","CX","FINANCE_ADMIN"]'``.
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from coreiq_scorer.core.models import FunctionName, NdaStatus, normalise_scope


class Settings(BaseSettings):
    """Settings for coreiq-scorer.

    Environment variable prefix: COREIQ_
    """

    service_name: str = "coreiq-scorer"

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # Scoring scope: functions taking part in aggregation for new assessments
    default_active_functions: list[FunctionName] = [FunctionName.OPS, FunctionName.CX]

    # New assessments
    default_nda_status: NdaStatus = NdaStatus.NOT_SENT

    # Export
    export_filename: str = "coreiq_export.csv"

    # Seed the demo audit on startup
    seed_demo_assessment: bool = True

    model_config = SettingsConfigDict(env_prefix="COREIQ_")

    @field_validator("default_active_functions")
    @classmethod
    def _canonical_scope(cls, value: list[FunctionName]) -> list[FunctionName]:
        return list(normalise_scope(value))
