"""Configuration provider following Black Box Design principles."""
import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Protocol
from urllib.parse import quote, unquote, urlsplit

logger = logging.getLogger(__name__)

DEFAULT_REDIS_URL = "redis://localhost:6379"
DEFAULT_REDIS_PORT = 6379
DEFAULT_PREFIX = "hubot"

# Checked in order, first one set wins
REDIS_URL_ENV_VARS = ("REDISTOGO_URL", "REDISCLOUD_URL", "BOXEN_REDIS_URL", "REDIS_URL")
CLOUD_FOUNDRY_ENV_VAR = "CF_REDIS_INSTANCE_NAME"


@dataclass(frozen=True)
class ConnectionTarget:
    """Where the brain lives in Redis."""
    url: str
    host: Optional[str]
    port: int
    password: Optional[str]
    prefix: str
    socket_path: Optional[str] = None
    has_credentials: bool = False
    skip_ready_check: bool = False

    @property
    def is_unix_socket(self) -> bool:
        """Check if the target is a UNIX domain socket."""
        return self.socket_path is not None

    @property
    def storage_key(self) -> str:
        """Redis key holding the serialized brain."""
        return f"{self.prefix}:storage"

    @classmethod
    def from_url(cls, url: str, no_ready_check: bool = False) -> "ConnectionTarget":
        """
        Parse a redis URL into a connection target.

        Args:
            url: redis://<host>:<port>[/<prefix>] or redis://<socketpath>[?<prefix>]
            no_ready_check: Skip the server ready check (e.g. behind Twemproxy)

        Returns:
            ConnectionTarget for the URL
        """
        info = urlsplit(url)
        has_userinfo = bool(info.username or info.password)
        has_credentials = bool(info.password)
        password = unquote(info.password) if info.password is not None else None

        if not info.hostname:
            return cls(
                url=url,
                host=None,
                port=DEFAULT_REDIS_PORT,
                password=password,
                prefix=info.query or DEFAULT_PREFIX,
                socket_path=info.path,
                has_credentials=has_credentials,
            )

        return cls(
            url=url,
            host=info.hostname,
            port=info.port or DEFAULT_REDIS_PORT,
            password=password,
            prefix=info.path.replace("/", "", 1) or DEFAULT_PREFIX,
            has_credentials=has_credentials,
            # Proxies in front of authenticated Redis tend not to answer INFO
            skip_ready_check=has_userinfo or no_ready_check,
        )


@dataclass
class BrainConfig:
    """Host brain runtime configuration."""
    save_interval: int
    reconnect_delay: float
    log_level: str


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_connection_target(self) -> ConnectionTarget:
        """Get the Redis connection target."""
        ...

    def get_brain_config(self) -> BrainConfig:
        """Get host brain configuration."""
        ...


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def __init__(self, environ: Optional[Mapping[str, Any]] = None):
        self.environ = os.environ if environ is None else environ

    def discover_redis_env(self) -> Optional[str]:
        """Name of the environment variable the redis URL comes from, if any."""
        for name in REDIS_URL_ENV_VARS:
            if self.environ.get(name):
                return name

        if self.environ.get("CF_REDIS_SERVICE"):
            return CLOUD_FOUNDRY_ENV_VAR

        return None

    def resolve_redis_url(self) -> str:
        """Resolve the redis URL from the environment."""
        redis_env = self.discover_redis_env()

        if redis_env == CLOUD_FOUNDRY_ENV_VAR:
            logger.info(f"Discovered redis from {redis_env} environment variable. Pulling from VCAP")
            return self.build_cloud_foundry_url()

        if redis_env:
            logger.info(f"Discovered redis from {redis_env} environment variable")
            return self.environ[redis_env]

        logger.info("Using default redis on localhost:6379")
        return DEFAULT_REDIS_URL

    def build_cloud_foundry_url(self) -> str:
        """
        Build a redis URL from the Cloud Foundry service binding.

        VCAP_SERVICES maps service names to lists of bound instances. The
        instance named by CF_REDIS_INSTANCE_NAME also becomes the brain prefix.

        Raises:
            ValueError: If the service, instance or credentials are missing
        """
        service_name = self.environ.get("CF_REDIS_SERVICE")
        instance_name = self.environ.get("CF_REDIS_INSTANCE_NAME")

        raw_services = self.environ.get("VCAP_SERVICES")
        try:
            services = json.loads(raw_services)
        except (TypeError, ValueError):
            services = raw_services

        if not isinstance(services, Mapping):
            raise ValueError("VCAP_SERVICES does not describe any services")

        instances = services.get(service_name)
        if not instances:
            raise ValueError(f"Redis service {service_name} not found in VCAP_SERVICES")

        instance = next((i for i in instances if i.get("name") == instance_name), None)
        if instance is None:
            raise ValueError(
                f"Redis instance {instance_name} not bound to service {service_name}"
            )

        credentials = instance.get("credentials")
        if not credentials:
            raise ValueError(f"Redis instance {instance_name} has no credentials")

        host = credentials.get("hostname") or credentials.get("host")
        password = quote(str(credentials.get("password", "")), safe="")

        return f"redis://:{password}@{host}:{credentials.get('port')}/{instance_name}"

    def get_connection_target(self) -> ConnectionTarget:
        """Get the Redis connection target from environment variables."""
        redis_url = self.resolve_redis_url()

        no_ready_check = bool(self.environ.get("REDIS_NO_CHECK"))
        if no_ready_check:
            logger.info("Turning off redis ready checks")

        return ConnectionTarget.from_url(redis_url, no_ready_check=no_ready_check)

    def get_brain_config(self) -> BrainConfig:
        """Get host brain configuration from environment variables."""
        return BrainConfig(
            save_interval=int(self.environ.get("REDIS_BRAIN_SAVE_INTERVAL", "5")),
            reconnect_delay=float(self.environ.get("REDIS_BRAIN_RECONNECT_DELAY", "1.0")),
            log_level=self.environ.get("LOG_LEVEL", "INFO").upper(),
        )
