from dataclasses import dataclass, field
from enum import Enum

from settings_store.configuration import setting


@dataclass
class EmailAuthenticationSettings:
    user_name: str | None = setting("UserName", default=None)
    password: str | None = setting("Password", default=None)
    some_unused_valued: str | None = setting("SomeUnusedValued", default=None)


@dataclass
class EmailSettings:
    host: str | None = setting("Host", default=None)
    port: int = setting("Port", default=0)
    authentication: EmailAuthenticationSettings = setting(
        "Authentication", default_factory=EmailAuthenticationSettings
    )


class Mode(Enum):
    OFF = "off"
    ON = "on"
    AUTO = "auto"


@dataclass
class ProxySettings:
    url: str = ""
    port: int = 0


@dataclass
class FeatureSettings:
    __section__ = "Features"

    enabled: bool = False
    ratio: float = 0.0
    retries: int = 0
    mode: Mode = Mode.OFF
    proxy: ProxySettings | None = None


@dataclass
class UnsupportedSettings:
    tags: list[str] = field(default_factory=list)


@dataclass
class MissingDefaultSettings:
    name: str


@dataclass
class ColonKeySettings:
    name: str = setting("Bad:Key", default="")


def concrete_email_settings() -> EmailSettings:
    return EmailSettings(
        host="example.com",
        port=25,
        authentication=EmailAuthenticationSettings(
            user_name="user@example.com",
            password="password",
        ),
    )


@dataclass
class SmtpSettings:
    host: str = setting("Host", default="localhost")
    port: int = setting("Port", default=25)
    use_tls: bool = setting("UseTls", default=True)
    mode: Mode = setting("Mode", default=Mode.AUTO)
