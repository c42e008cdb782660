import os

from dotenv import load_dotenv

load_dotenv()


class Config:
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JSON_SORT_KEYS = False
    ENV = os.getenv("FLASK_ENV", "development")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE = os.getenv("LOG_FILE")

    CURRENCY_SYMBOL = os.getenv("CURRENCY_SYMBOL", "₹")
    HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "10"))

    # email (SendGrid)
    SENDGRID_API_KEY = os.getenv("SENDGRID_API_KEY", "")
    SENDGRID_FROM_EMAIL = os.getenv("SENDGRID_FROM_EMAIL", "orders@ezypzy.shop")
    SENDGRID_FROM_NAME = os.getenv("SENDGRID_FROM_NAME", "EzyPzy Shop")

    # push (Expo)
    EXPO_PUSH_URL = os.getenv("EXPO_PUSH_URL", "https://exp.host/--/api/v2/push/send")

    # stock images
    UNSPLASH_ACCESS_KEY = os.getenv("UNSPLASH_ACCESS_KEY", "")

    # uploads: "blob" or "appgen"; unset picks blob when a token is present
    UPLOAD_BACKEND = os.getenv("UPLOAD_BACKEND")
    BLOB_READ_WRITE_TOKEN = os.getenv("BLOB_READ_WRITE_TOKEN", "")
    BLOB_API_URL = os.getenv("BLOB_API_URL", "https://blob.vercel-storage.com")
    APPGEN_UPLOAD_URL = os.getenv("APPGEN_UPLOAD_URL", "https://app-cdn.appgen.com/upload")
    UPLOAD_MAX_BYTES = int(os.getenv("UPLOAD_MAX_BYTES", str(10 * 1024 * 1024)))
    # base64 inflates payloads by 4/3, leave room for it plus multipart framing
    MAX_CONTENT_LENGTH = UPLOAD_MAX_BYTES * 3 // 2

    @staticmethod
    def init_app(app):
        if not os.getenv("DATABASE_URL"):
            os.makedirs(app.instance_path, exist_ok=True)
            app.config["SQLALCHEMY_DATABASE_URI"] = f"sqlite:///{os.path.join(app.instance_path, 'app.db')}"
        else:
            app.config["SQLALCHEMY_DATABASE_URI"] = os.getenv("DATABASE_URL")


class TestConfig(Config):
    TESTING = True
    LOG_LEVEL = "WARNING"
    LOG_FILE = None
    SENDGRID_API_KEY = ""
    UNSPLASH_ACCESS_KEY = ""
    UPLOAD_BACKEND = "appgen"
    BLOB_READ_WRITE_TOKEN = ""

    @staticmethod
    def init_app(app):
        app.config["SQLALCHEMY_DATABASE_URI"] = "sqlite://"
