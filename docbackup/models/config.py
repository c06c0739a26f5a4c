# =============================================================================
# Configuration Models Module
# =============================================================================
# Provides Pydantic Settings models for the backup job:
# - ContainerSettings: connection details for one document container
# - BackupSettings: source/destination containers plus run defaults
# =============================================================================

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = [
    "ContainerSettings",
    "BackupSettings",
]


class ContainerSettings(BaseModel):
    """
    Connection details for a single document container.

    Attributes:
        connection_string: MongoDB-API connection URI
        database: Database name
        container: Container (collection) name
    """

    connection_string: str = Field(..., description="MongoDB-API connection URI")
    database: str = Field(..., description="Database name")
    container: str = Field(..., description="Container (collection) name")


# =============================================================================
# Backup Settings
# =============================================================================

class BackupSettings(BaseSettings):
    """
    Configuration for a container backup job.

    Maps environment variables:
    - fromCosmosConnectionString → source_connection_string
    - fromCosmosDatabaseName → source_database
    - fromCosmosContainerName → source_container
    - toCosmosConnectionString → destination_connection_string
    - toCosmosDatabaseName → destination_database
    - toCosmosContainerName → destination_container
    - BACKUP_PARTITION_KEY → partition_key_field
    - BACKUP_ID_FIELD → id_field
    - BACKUP_LOG_DIR → log_dir
    - BACKUP_REQUEST_CHARGE → request_charge
    - BACKUP_SERVER_SELECTION_TIMEOUT_MS → server_selection_timeout_ms

    Attributes:
        partition_key_field: Partition key field name (default: "pk")
        id_field: Identifier field name (default: "id")
        log_dir: Directory for per-run log files (default: "log")
        request_charge: Read Cosmos DB request charges after each operation
        server_selection_timeout_ms: Client server selection timeout
    """

    source_connection_string: str = Field(..., validation_alias="fromCosmosConnectionString", description="Source connection URI")
    source_database: str = Field(..., validation_alias="fromCosmosDatabaseName", description="Source database name")
    source_container: str = Field(..., validation_alias="fromCosmosContainerName", description="Source container name")
    destination_connection_string: str = Field(..., validation_alias="toCosmosConnectionString", description="Destination connection URI")
    destination_database: str = Field(..., validation_alias="toCosmosDatabaseName", description="Destination database name")
    destination_container: str = Field(..., validation_alias="toCosmosContainerName", description="Destination container name")
    partition_key_field: str = Field("pk", validation_alias="BACKUP_PARTITION_KEY", description="Partition key field name")
    id_field: str = Field("id", validation_alias="BACKUP_ID_FIELD", description="Identifier field name")
    log_dir: str = Field("log", validation_alias="BACKUP_LOG_DIR", description="Directory for per-run log files")
    request_charge: bool = Field(False, validation_alias="BACKUP_REQUEST_CHARGE", description="Collect Cosmos DB request charges")
    server_selection_timeout_ms: int = Field(10000, validation_alias="BACKUP_SERVER_SELECTION_TIMEOUT_MS", description="Server selection timeout (ms)")

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",  # Ignore unrelated env vars from shared .env files
    )

    @property
    def source(self) -> ContainerSettings:
        """Connection details of the container being backed up."""
        return ContainerSettings(
            connection_string=self.source_connection_string,
            database=self.source_database,
            container=self.source_container,
        )

    @property
    def destination(self) -> ContainerSettings:
        """Connection details of the backup container."""
        return ContainerSettings(
            connection_string=self.destination_connection_string,
            database=self.destination_database,
            container=self.destination_container,
        )
