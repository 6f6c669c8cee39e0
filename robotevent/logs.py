import json, time, uuid, datetime as dt
from typing import Optional

from .db import get_conn, table, quote_like, quote_value, fetch_all, fetch_one
from .domain.db_query import DbQuery

DDL = """
CREATE TABLE IF NOT EXISTS {t} (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  ts TEXT NOT NULL,
  user TEXT NOT NULL,
  action TEXT NOT NULL,
  entity_type TEXT,
  entity_id TEXT,
  request_id TEXT,
  before_json TEXT,
  after_json TEXT,
  payload_json TEXT,
  result TEXT,
  err_msg TEXT,
  latency_ms INTEGER
);
CREATE INDEX IF NOT EXISTS idx_{t}_ts ON {t}(ts);
CREATE INDEX IF NOT EXISTS idx_{t}_action ON {t}(action);
"""

def ensure_log_schema():
    with get_conn() as conn:
        conn.executescript(DDL.format(t=table("operation_log")))
        conn.commit()

class LogContext:
    def __init__(self, action: str, user: str = "admin"):
        self.action = action
        self.user = user
        self.request_id = str(uuid.uuid4())
        self.start = time.perf_counter()
        self.before = None
        self.after = None
        self.payload = None
        self.entity_type = None
        self.entity_id = None

    def set_entity(self, etype: str, eid: str):
        self.entity_type = etype
        self.entity_id = eid

    def set_before(self, obj): self.before = obj
    def set_after(self, obj): self.after = obj
    def set_payload(self, obj): self.payload = obj

    def write(self, result: str = "OK", err: Optional[str] = None):
        elapsed_ms = int((time.perf_counter() - self.start) * 1000)
        rec = {
            "ts": dt.datetime.now(dt.timezone.utc).isoformat(),
            "user": self.user,
            "action": self.action,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "request_id": self.request_id,
            "before_json": json.dumps(self.before, ensure_ascii=False) if self.before is not None else None,
            "after_json": json.dumps(self.after, ensure_ascii=False) if self.after is not None else None,
            "payload_json": json.dumps(self.payload, ensure_ascii=False) if self.payload is not None else None,
            "result": result,
            "err_msg": err,
            "latency_ms": elapsed_ms,
        }
        with get_conn() as conn:
            conn.execute(
                f"""INSERT INTO {table("operation_log")}
                (ts,user,action,entity_type,entity_id,request_id,before_json,after_json,payload_json,result,err_msg,latency_ms)
                VALUES(:ts,:user,:action,:entity_type,:entity_id,:request_id,:before_json,:after_json,:payload_json,:result,:err_msg,:latency_ms)""",
                rec
            )
            conn.commit()

def _filtered(q: str|None, action: str|None, ts_from: str|None, ts_to: str|None) -> DbQuery:
    query = DbQuery().from_("operation_log")
    if q:
        like = quote_like(q)
        query.where(
            f"payload_json LIKE {like} ESCAPE '\\' OR before_json LIKE {like} ESCAPE '\\' "
            f"OR after_json LIKE {like} ESCAPE '\\'"
        )
    if action:
        query.where(f"action = {quote_value(action)}")
    if ts_from:
        query.where(f"ts >= {quote_value(ts_from)}")
    if ts_to:
        query.where(f"ts <= {quote_value(ts_to)}")
    return query

def search_logs(q: str|None, action: str|None, ts_from: str|None, ts_to: str|None, page:int, size:int):
    page = max(1, int(page))
    count_q = _filtered(q, action, ts_from, ts_to).select("COUNT(1) AS cnt")
    rows_q = _filtered(q, action, ts_from, ts_to).order_by("ts DESC, id DESC").limit(size, (page-1)*size)
    with get_conn() as conn:
        total = fetch_one(conn, count_q)["cnt"]
        return total, fetch_all(conn, rows_q)
