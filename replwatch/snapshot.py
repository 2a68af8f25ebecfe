"""Decoder for driver-level result sets into typed diagnostic snapshots."""

import re
from dataclasses import dataclass, field, fields
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Type, TypeVar, Union

# A single result cell as handed over by the driver. None is SQL NULL or absent.
Cell = Union[str, bytes, int, bool, None]

T = TypeVar("T")

_INT_PATTERN = re.compile(r"[+-]?\d+")
_TRUE_WORDS = {"1", "t", "true", "yes", "on"}


@dataclass
class ResultSet:
    """Ordered column names plus rows of raw cells."""
    columns: List[str]
    rows: List[Sequence[Cell]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rows)


# =============================================================================
# CELL CONVERSION
# =============================================================================

def to_str(value: Cell) -> str:
    """Convert a cell to text; NULL becomes the empty string."""
    if value is None:
        return ""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


def to_optional_int(value: Cell) -> Optional[int]:
    """Parse a base-10 integer cell, returning None when absent or unparseable."""
    if value is None:
        return None
    if isinstance(value, int):
        return int(value)
    text = to_str(value).strip()
    if not _INT_PATTERN.fullmatch(text):
        return None
    return int(text)


def to_int(value: Cell) -> int:
    """Parse a base-10 integer cell; anything unparseable is 0."""
    parsed = to_optional_int(value)
    return parsed if parsed is not None else 0


def to_bool(value: Cell) -> bool:
    """Parse common boolean spellings; anything unrecognised is False."""
    if value is None:
        return False
    if isinstance(value, int):
        return value != 0
    text = to_str(value).strip().lower()
    return text in _TRUE_WORDS


def column(names: Union[str, Tuple[str, ...]], convert: Callable[[Cell], Any], default: Any) -> Any:
    """Declare a record field fed from one column (or the first present alias)."""
    if isinstance(names, str):
        names = (names,)
    return field(default=default, metadata={"columns": names, "convert": convert})


def _text(names: Union[str, Tuple[str, ...]]) -> Any:
    return column(names, to_str, "")


def _int(names: Union[str, Tuple[str, ...]]) -> Any:
    return column(names, to_int, 0)


# =============================================================================
# RECORD TYPES
# =============================================================================

@dataclass(frozen=True)
class MasterStatus:
    """
    Result of SHOW MASTER STATUS.

    Field specification: https://dev.mysql.com/doc/refman/8.0/en/show-master-status.html
    """
    file: str = _text("File")
    position: int = _int("Position")
    binlog_do_db: str = _text("Binlog_Do_DB")
    binlog_ignore_db: str = _text("Binlog_Ignore_DB")
    executed_gtid_set: str = _text("Executed_Gtid_Set")


@dataclass(frozen=True)
class SlaveStatus:
    """
    Result of SHOW SLAVE STATUS / SHOW REPLICA STATUS.

    Both the legacy Master_*/Slave_* column names and the 8.0.22+
    Source_*/Replica_* names are accepted. The all-defaults instance means
    no replication is configured on the endpoint.
    """
    slave_io_state: str = _text(("Slave_IO_State", "Replica_IO_State"))
    master_host: str = _text(("Master_Host", "Source_Host"))
    master_user: str = _text(("Master_User", "Source_User"))
    master_port: int = _int(("Master_Port", "Source_Port"))
    connect_retry: int = _int("Connect_Retry")
    master_log_file: str = _text(("Master_Log_File", "Source_Log_File"))
    read_master_log_pos: int = _int(("Read_Master_Log_Pos", "Read_Source_Log_Pos"))
    relay_log_file: str = _text("Relay_Log_File")
    relay_log_pos: int = _int("Relay_Log_Pos")
    relay_master_log_file: str = _text(("Relay_Master_Log_File", "Relay_Source_Log_File"))
    slave_io_running: str = _text(("Slave_IO_Running", "Replica_IO_Running"))
    slave_sql_running: str = _text(("Slave_SQL_Running", "Replica_SQL_Running"))
    replicate_do_db: str = _text("Replicate_Do_DB")
    replicate_ignore_db: str = _text("Replicate_Ignore_DB")
    replicate_do_table: str = _text("Replicate_Do_Table")
    replicate_ignore_table: str = _text("Replicate_Ignore_Table")
    replicate_wild_do_table: str = _text("Replicate_Wild_Do_Table")
    replicate_wild_ignore_table: str = _text("Replicate_Wild_Ignore_Table")
    last_errno: int = _int("Last_Errno")
    last_error: str = _text("Last_Error")
    skip_counter: int = _int("Skip_Counter")
    exec_master_log_pos: int = _int(("Exec_Master_Log_Pos", "Exec_Source_Log_Pos"))
    relay_log_space: int = _int("Relay_Log_Space")
    until_condition: str = _text("Until_Condition")
    until_log_file: str = _text("Until_Log_File")
    until_log_pos: int = _int("Until_Log_Pos")
    master_ssl_allowed: str = _text(("Master_SSL_Allowed", "Source_SSL_Allowed"))
    master_ssl_ca_file: str = _text(("Master_SSL_CA_File", "Source_SSL_CA_File"))
    master_ssl_ca_path: str = _text(("Master_SSL_CA_Path", "Source_SSL_CA_Path"))
    master_ssl_cert: str = _text(("Master_SSL_Cert", "Source_SSL_Cert"))
    master_ssl_cipher: str = _text(("Master_SSL_Cipher", "Source_SSL_Cipher"))
    master_ssl_key: str = _text(("Master_SSL_Key", "Source_SSL_Key"))
    seconds_behind_master: Optional[int] = column(
        ("Seconds_Behind_Master", "Seconds_Behind_Source"), to_optional_int, None
    )
    master_ssl_verify_server_cert: str = _text(("Master_SSL_Verify_Server_Cert", "Source_SSL_Verify_Server_Cert"))
    last_io_errno: int = _int("Last_IO_Errno")
    last_io_error: str = _text("Last_IO_Error")
    last_sql_errno: int = _int("Last_SQL_Errno")
    last_sql_error: str = _text("Last_SQL_Error")
    replicate_ignore_server_ids: str = _text("Replicate_Ignore_Server_Ids")
    master_server_id: int = _int(("Master_Server_Id", "Source_Server_Id"))
    master_uuid: str = _text(("Master_UUID", "Source_UUID"))
    master_info_file: str = _text(("Master_Info_File", "Source_Info_File"))
    sql_delay: int = _int("SQL_Delay")
    # NULL unless a delayed replica is waiting
    sql_remaining_delay: int = _int("SQL_Remaining_Delay")
    slave_sql_running_state: str = _text(("Slave_SQL_Running_State", "Replica_SQL_Running_State"))
    master_retry_count: int = _int(("Master_Retry_Count", "Source_Retry_Count"))
    master_bind: str = _text(("Master_Bind", "Source_Bind"))
    last_io_error_timestamp: str = _text("Last_IO_Error_Timestamp")
    last_sql_error_timestamp: str = _text("Last_SQL_Error_Timestamp")
    master_ssl_crl: str = _text(("Master_SSL_Crl", "Source_SSL_Crl"))
    master_ssl_crlpath: str = _text(("Master_SSL_Crlpath", "Source_SSL_Crlpath"))
    retrieved_gtid_set: str = _text("Retrieved_Gtid_Set")
    executed_gtid_set: str = _text("Executed_Gtid_Set")
    auto_position: bool = column("Auto_Position", to_bool, False)


@dataclass(frozen=True)
class Process:
    """One row of SHOW FULL PROCESSLIST."""
    id: int = _int("Id")
    user: str = _text("User")
    host: str = _text("Host")
    db: str = _text("db")
    command: str = _text("Command")
    time: int = _int("Time")
    state: str = _text("State")
    info: str = _text("Info")


# =============================================================================
# DECODING
# =============================================================================

def rows_to_dicts(result: ResultSet) -> List[Dict[str, Cell]]:
    """Turn each row into a column-name mapping, preserving row order."""
    mapped = []
    for row in result.rows:
        mapped.append({name: row[i] for i, name in enumerate(result.columns) if i < len(row)})
    return mapped


def project(record_cls: Type[T], row: Dict[str, Cell]) -> T:
    """
    Build a record from a row mapping by matching declared column names.

    Fields whose column is missing keep their default (zero) value.
    """
    values = {}
    for f in fields(record_cls):
        names = f.metadata.get("columns")
        if not names:
            continue
        for name in names:
            if name in row:
                values[f.name] = f.metadata["convert"](row[name])
                break
    return record_cls(**values)


def decode_master_status(result: ResultSet) -> MasterStatus:
    """Decode SHOW MASTER STATUS; an empty result gives the zero value."""
    rows = rows_to_dicts(result)
    if not rows:
        return MasterStatus()
    return project(MasterStatus, rows[0])


def decode_slave_status(result: ResultSet) -> SlaveStatus:
    """Decode SHOW SLAVE STATUS; an empty result gives the zero value."""
    rows = rows_to_dicts(result)
    if not rows:
        return SlaveStatus()
    return project(SlaveStatus, rows[0])


def decode_processlist(result: ResultSet) -> List[Process]:
    return [project(Process, row) for row in rows_to_dicts(result)]


def decode_variables(result: ResultSet) -> Dict[str, str]:
    """
    Decode a Variable_name/Value result (SHOW VARIABLES, SHOW STATUS).

    Rows without a variable name are skipped.
    """
    variables = {}
    for row in rows_to_dicts(result):
        name = to_str(row.get("Variable_name"))
        if not name:
            continue
        variables[name] = to_str(row.get("Value"))
    return variables


def decode_innodb_text(result: ResultSet) -> str:
    """Pull the Status column out of SHOW ENGINE INNODB STATUS."""
    rows = rows_to_dicts(result)
    if not rows:
        return ""
    return to_str(rows[0].get("Status"))
