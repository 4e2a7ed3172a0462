"""MongoDB configuration using pydantic-settings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class MongoConfiguration(BaseSettings):
    """Configuration for a MongoDB document store connection.

    All settings can be configured via environment variables with the
    SOURCED_MONGO_ prefix. For example:
    - SOURCED_MONGO_URI=mongodb://localhost:27017
    - SOURCED_MONGO_DATABASE=myapp
    - SOURCED_MONGO_MAX_POOL_SIZE=50

    Attributes:
        uri: MongoDB connection URI (e.g., "mongodb://localhost:27017" or MongoDB Atlas URI)
        database: Database name to use (default: "sourced")
        max_pool_size: Maximum number of connections in the pool
        min_pool_size: Minimum number of connections in the pool
        max_idle_time_ms: Maximum idle time for connections in milliseconds
        server_selection_timeout_ms: Server selection timeout in milliseconds
        connect_timeout_ms: Connection timeout in milliseconds
        socket_timeout_ms: Socket timeout in milliseconds

    Examples:
        >>> config = MongoConfiguration(
        ...     uri="mongodb://localhost:27017",
        ...     database="myapp"
        ... )
        >>> # From SOURCED_MONGO_* environment variables
        >>> config = MongoConfiguration()
    """

    model_config = SettingsConfigDict(env_prefix="SOURCED_MONGO_")

    uri: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection URI (e.g., mongodb://localhost:27017)",
    )
    database: str = Field(
        default="sourced",
        description="Database name to connect to",
    )
    max_pool_size: int = Field(
        default=100,
        description="Maximum number of connections in the connection pool",
        ge=1,
    )
    min_pool_size: int = Field(
        default=0,
        description="Minimum number of connections in the connection pool",
        ge=0,
    )
    max_idle_time_ms: int | None = Field(
        default=None,
        description="Maximum idle time for pooled connections in milliseconds",
        ge=0,
    )
    server_selection_timeout_ms: int = Field(
        default=30000,
        description="Server selection timeout in milliseconds",
        ge=0,
    )
    connect_timeout_ms: int = Field(
        default=20000,
        description="Connection timeout in milliseconds",
        ge=0,
    )
    socket_timeout_ms: int | None = Field(
        default=None,
        description="Socket timeout in milliseconds (None for no timeout)",
        ge=0,
    )
