from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "TallyRelay"
    debug: bool = False

    # Tally webhook signing
    tally_signing_secret: str = ""
    require_signature: bool = True

    # Recipients: comma / semicolon / whitespace / newline separated
    admin_emails: str = ""
    site_admin_email: str = ""

    # Admin API (disabled when empty)
    admin_api_key: str = ""

    # Debug log files for incoming payloads and outgoing email summaries (PII risk)
    debug_logging: bool = False
    log_dir: str = "./logs/tally-webhook"

    # Outgoing mail
    email_provider: str = ""  # smtp, gmail, resend, sendgrid
    sender_name: str = ""
    sender_email: str = ""

    smtp_host: str = "localhost"
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    smtp_use_tls: bool = True

    resend_api_key: str = ""
    sendgrid_api_key: str = ""

    gmail_credentials_path: str = "/app/config/gmail/credentials.json"
    gmail_token_path: str = "/app/config/gmail/token.json"

    # Email rendering
    subject_prefix: str = "[Tally Feedback]"
    timezone: str = "UTC"
    date_format: str = "%B %d, %Y"
    time_format: str = "%I:%M %p"
    show_submission_ids: bool = False
    skip_option_checkboxes: bool = True

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()


def get_settings() -> Settings:
    return settings
