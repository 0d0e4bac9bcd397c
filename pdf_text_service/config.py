import json
import logging
import os

import boto3
from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

MB = 1024 * 1024


def get_service_secret(secret_arn: str, region: str) -> str:
    """Resolve the shared secret from Secrets Manager.

    Stored either as a plain string or as {"pdf_service_secret": "..."}.
    """
    sm = boto3.client("secretsmanager", region_name=region)
    sec = sm.get_secret_value(SecretId=secret_arn)
    sec_string = sec.get("SecretString") or ""
    try:
        value = json.loads(sec_string)
    except ValueError:
        return sec_string
    if isinstance(value, dict):
        return str(value.get("pdf_service_secret", ""))
    return sec_string


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    port: int = 3000
    host: str = "0.0.0.0"
    service_secret: str = ""
    secret_header: str = "x-service-secret"
    url_field: str = "pdf_url"
    extract_path: str = "/extract-text"
    service_name: str = "PsiGo PDF Service"
    fetch_timeout: float = 30.0
    max_pdf_bytes: int = 50 * MB
    max_body_bytes: int = 10 * MB
    log_level: str = "INFO"

    @property
    def auth_enabled(self) -> bool:
        return bool(self.service_secret)

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        env = os.environ if environ is None else environ

        secret = env.get("PDF_SERVICE_SECRET", "")
        secret_arn = env.get("PDF_SERVICE_SECRET_ARN")
        if not secret and secret_arn:
            region = env.get("AWS_REGION", "us-east-1")
            logger.info("Loading service secret from Secrets Manager (%s)", region)
            secret = get_service_secret(secret_arn, region)

        return cls(
            port=int(env.get("PORT") or 3000),
            host=env.get("HOST") or "0.0.0.0",
            service_secret=secret,
            secret_header=(env.get("SECRET_HEADER") or "x-service-secret").lower(),
            url_field=env.get("URL_FIELD") or "pdf_url",
            extract_path=env.get("EXTRACT_PATH") or "/extract-text",
            service_name=env.get("SERVICE_NAME") or "PsiGo PDF Service",
            fetch_timeout=float(env.get("FETCH_TIMEOUT") or 30),
            max_pdf_bytes=int(env.get("MAX_PDF_BYTES") or 50 * MB),
            max_body_bytes=int(env.get("MAX_BODY_BYTES") or 10 * MB),
            log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
        )
