"""Application configuration."""
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Ultravox
    ultravox_api_key: str
    ultravox_api_url: str = "https://api.ultravox.ai/api"
    ultravox_model: str = "fixie-ai/ultravox"
    ultravox_voice: str = "Mark"
    ultravox_temperature: float = 0.3

    # Public URL the AI platform uses to reach our tool endpoints (e.g. ngrok)
    tools_base_url: str = ""

    # Telephony provider used for new sessions: "twilio" or "pbxware"
    telephony_provider: Literal["twilio", "pbxware"] = "twilio"

    # Twilio
    twilio_account_sid: str = ""
    twilio_auth_token: str = ""
    twilio_phone_number: str = ""

    # Transfers
    destination_phone_number: str = ""
    transfer_hold_message: str = "Please hold while I transfer your call"

    # PBXware
    pbxware_api_url: str = ""
    pbxware_api_key: str = ""
    pbxware_sip_domain: str = ""
    ai_sip_username: str = ""
    ai_sip_password: str = ""

    # Cal.com
    calcom_api_key: str = ""
    calcom_event_type_id: int = 0
    calcom_api_url: str = "https://api.cal.com/v2"

    # Community center
    center_profile_path: str = ""
    default_time_zone: str = "America/Los_Angeles"

    # Roster database
    database_url: str = "sqlite+aiosqlite:///:memory:"
    students_csv_path: str = "data/students.csv"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


settings = Settings()
