from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    APP_NAME: str = "OnnBit"
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str | None = None
    DB_USER: str = ""
    DB_PASSWORD: str = ""
    DB_HOST: str = "localhost"
    DB_PORT: str = "3306"
    DB_NAME: str = ""

    SMTP_SERVER: str = "localhost"
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    MAIL_FROM_ADDRESS: str = "no-reply@onnbit.com"

    FIREBASE_API_KEY: str = ""

    OTP_EXPIRE_MINUTES: int = 5
    SESSION_EXPIRE_DAYS: int = 30

    RATE_LIMIT_ENABLED: bool = True
    OTP_RATE_LIMIT: str = "5/minute"
    OTP_VERIFY_RATE_LIMIT: str = "5/minute"
    LOGIN_RATE_LIMIT: str = "10/minute"

    @property
    def SQLALCHEMY_DATABASE_URI(self):
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"mysql+pymysql://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

    class Config:
        env_file = ".env"

settings = Settings()
