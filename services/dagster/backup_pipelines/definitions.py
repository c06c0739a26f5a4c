"""Dagster Definitions - Repository Configuration.

Defines jobs and resources for the container backup pipeline.
"""

from dagster import Definitions, EnvVar

from .jobs import container_backup_job
from .resources import DocumentStoreResource


defs = Definitions(
    jobs=[container_backup_job],
    resources={
        "source_store": DocumentStoreResource(
            connection_string=EnvVar("fromCosmosConnectionString"),
            database=EnvVar("fromCosmosDatabaseName"),
            container=EnvVar("fromCosmosContainerName"),
            partition_key_field="pk",
        ),
        "backup_store": DocumentStoreResource(
            connection_string=EnvVar("toCosmosConnectionString"),
            database=EnvVar("toCosmosDatabaseName"),
            container=EnvVar("toCosmosContainerName"),
            partition_key_field="pk",
        ),
    },
)
