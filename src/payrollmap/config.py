"""Configuration management for payrollmap."""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()


def _parse_cors_origins() -> list[str]:
    """Parse CORS origins from environment variable."""
    cors_env = os.getenv("CORS_ALLOW_ORIGINS")
    if cors_env:
        return cors_env.split(",")
    return ["*"]


class Settings(BaseModel):
    """Application settings."""

    # Storage root shared by the structure file and generated output files
    storage_root: Path = Path(os.getenv("STORAGE_ROOT", "upload"))
    structure_file_name: str = os.getenv(
        "STRUCTURE_FILE_NAME", "Structure Sheet Payroll Analysis.xlsx"
    )

    # Upload handling
    payroll_sheet_name: str = os.getenv("PAYROLL_SHEET_NAME", "payroll history")  # matched case-insensitively
    output_sheet_title: str = os.getenv("OUTPUT_SHEET_TITLE", "Payroll History")
    output_file_prefix: str = os.getenv("OUTPUT_FILE_PREFIX", "Processed_")
    output_file_label: str = os.getenv("OUTPUT_FILE_LABEL", "Processed_Output.xlsx")

    # Run history (audit log of process / add-column requests)
    database_path: Path = Path(os.getenv("DATABASE_PATH", "data/payrollmap.db"))
    enable_run_history: bool = os.getenv("ENABLE_RUN_HISTORY", "true").lower() == "true"

    # Server settings
    host: str = os.getenv("HOST", "127.0.0.1")
    port: int = int(os.getenv("PORT", "8000"))
    log_level: str = os.getenv("LOG_LEVEL", "info")

    # CORS settings (comma-separated list of allowed origins, or * for all)
    cors_allow_origins: list[str] = _parse_cors_origins()


settings = Settings()
