from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Photoshape Customizer API"
    env: str = "local"
    log_level: str = "INFO"

    storage_root: str = "data"
    customizer_folder: str = "customizer"
    public_base_url: str = "/api/v1/customizer/files"

    canvas_width: int = 500
    canvas_height: int = 500
    max_upload_bytes: int = 10 * 1024 * 1024
    max_decode_pixels: int = 36_000_000
    strict_parameters: bool = False  # reject out-of-range x/y/zoom instead of clamping

    mask_cache_max_entries: int = 32
    png_compress_level: int = 6

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


settings = Settings()
