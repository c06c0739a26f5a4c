# =============================================================================
# Unit Tests: Backup Op
# =============================================================================

import pytest
from unittest.mock import Mock
from dagster import build_op_context

from docbackup.errors import InvalidRunModeError
from services.dagster.backup_pipelines.ops.backup_ops import (
    BackupRunConfig,
    _backup_container,
    backup_container,
)


# =============================================================================
# Helpers
# =============================================================================

def make_store(container, partition_key_field="pk", id_field="id"):
    store = Mock()
    store.get_container.return_value = container
    store.partition_key_field = partition_key_field
    store.id_field = id_field
    return store


# =============================================================================
# Test: Core Logic (_backup_container)
# =============================================================================

def test_backup_container_runs_job(source, destination):
    mock_log = Mock()
    config = BackupRunConfig(job_name="nightly", page_size=2, dry_run=False, run_mode="multi")

    result = _backup_container(
        source_store=make_store(source),
        backup_store=make_store(destination),
        config=config,
        log=mock_log,
    )

    assert result["succeeded"] is True
    assert result["job_name"] == "nightly"
    assert result["run_mode"] == "multi"
    assert result["stats"]["backups"] == 5
    assert result["stats"]["pages"] == 3
    assert sorted(destination.ids()) == ["d1", "d2", "d3", "d4", "d5"]

    log_calls = [str(call) for call in mock_log.info.call_args_list]
    assert any("Starting backup job 'nightly'" in call for call in log_calls)
    assert any("Total amount of backups taken: 5" in call for call in log_calls)


def test_backup_container_defaults_to_dry_run(source, destination):
    result = _backup_container(
        source_store=make_store(source),
        backup_store=make_store(destination),
        config=BackupRunConfig(),
        log=Mock(),
    )

    assert result["dry_run"] is True
    assert result["stats"]["backups"] == 0
    assert destination.calls == []


def test_backup_container_applies_query(source, destination):
    config = BackupRunConfig(
        query_filter={"id": "@id"},
        query_parameters={"@id": "d4"},
        dry_run=False,
    )

    result = _backup_container(
        source_store=make_store(source),
        backup_store=make_store(destination),
        config=config,
        log=Mock(),
    )

    assert result["stats"]["backups"] == 1
    assert destination.ids() == ["d4"]


def test_backup_container_invalid_run_mode(source, destination):
    with pytest.raises(InvalidRunModeError):
        _backup_container(
            source_store=make_store(source),
            backup_store=make_store(destination),
            config=BackupRunConfig(run_mode="batch"),
            log=Mock(),
        )
    assert source.calls == []


# =============================================================================
# Test: Dagster Op (backup_container)
# =============================================================================

def test_backup_container_op(source, destination):
    context = build_op_context(
        resources={
            "source_store": make_store(source),
            "backup_store": make_store(destination),
        },
    )

    result = backup_container(context, BackupRunConfig(dry_run=False, page_size=10))

    assert result["stats"]["backups"] == 5
    assert result["stats"]["pages"] == 1
