from intern_portal.config import Settings


def test_defaults_without_environment(monkeypatch):
    monkeypatch.delenv("JWT_SECRET", raising=False)
    monkeypatch.delenv("MAX_FILE_SIZE", raising=False)

    settings = Settings(_env_file=None)

    assert settings.JWT_SECRET is None
    assert settings.MAX_FILE_SIZE == 10 * 1024 * 1024
    assert settings.JWT_EXPIRE_MINUTES == 7 * 24 * 60


def test_values_come_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("JWT_SECRET", "from-env")
    monkeypatch.setenv("UPLOAD_RATE_MAX_UPLOADS", "3")
    monkeypatch.setenv("CORS_ORIGINS", '["https://portal.example.com", "https://hr.example.com"]')
    monkeypatch.setenv("UPLOAD_DIR", str(tmp_path))

    settings = Settings(_env_file=None)

    assert settings.JWT_SECRET == "from-env"
    assert settings.UPLOAD_RATE_MAX_UPLOADS == 3
    assert settings.CORS_ORIGINS == ["https://portal.example.com", "https://hr.example.com"]
    assert settings.upload_path == tmp_path


def test_values_come_from_env_file(monkeypatch, tmp_path):
    monkeypatch.delenv("JWT_SECRET", raising=False)
    monkeypatch.delenv("API_RATE_MAX_REQUESTS", raising=False)
    env_file = tmp_path / ".env"
    env_file.write_text("JWT_SECRET=from-file\nAPI_RATE_MAX_REQUESTS=42\nUNRELATED_KEY=ignored\n")

    settings = Settings(_env_file=str(env_file))

    assert settings.JWT_SECRET == "from-file"
    assert settings.API_RATE_MAX_REQUESTS == 42
