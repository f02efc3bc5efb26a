from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Storage layout
    data_dir: Path = Path("data")
    trash_dirname: str = ".trash"
    images_dirname: str = ".images"
    logs_dirname: str = ".logs"
    activity_log_filename: str = "activity.log"
    references_filename: str = ".references.json"
    trash_manifest_filename: str = ".trash.json"

    # Web server settings
    cors_allow_origins: list[str] = ["*"]

    log_level: str = "INFO"  # Can be DEBUG, INFO, WARNING, ERROR, CRITICAL

    @property
    def trash_dir(self) -> Path:
        return self.data_dir / self.trash_dirname

    @property
    def images_dir(self) -> Path:
        return self.data_dir / self.images_dirname

    @property
    def logs_dir(self) -> Path:
        return self.data_dir / self.logs_dirname

    @property
    def activity_log_path(self) -> Path:
        return self.logs_dir / self.activity_log_filename

    @property
    def references_path(self) -> Path:
        return self.data_dir / self.references_filename

    @property
    def trash_manifest_path(self) -> Path:
        return self.data_dir / self.trash_manifest_filename


settings = Settings()
