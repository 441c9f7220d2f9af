"""Maintenance function response (camelCase on the wire)."""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class MaintenanceResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = True
    expired_count: int
    in_app_reminder_count: int
    email_sent_count: int
    email_failed_count: int
    resend_configured: bool
