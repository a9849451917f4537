import io
from typing import Iterable, Optional

import pandas as pd
import pyarrow as pa
import pyarrow.ipc as pa_ipc
from pydantic import BaseModel
from starlette.requests import Request
from starlette.responses import StreamingResponse


ARROW_MIME = "application/vnd.apache.arrow.stream"


def client_wants_arrow(request: Request) -> bool:
    """True if the client sent `Accept: application/vnd.apache.arrow.stream`."""
    accept = request.headers.get("accept", "")
    return ARROW_MIME in accept.lower()


def readings_to_dataframe(readings: Iterable[BaseModel], columns: Iterable[str]) -> pd.DataFrame:
    """One row per reading, columns in the given order even when empty."""
    return pd.DataFrame([r.model_dump() for r in readings], columns=list(columns))


def dataframe_to_arrow_streaming_response(
    df: pd.DataFrame,
    filename: Optional[str] = "readings.arrow",
) -> StreamingResponse:
    """Serialize a DataFrame (without its index) as an Arrow IPC stream."""
    table = pa.Table.from_pandas(df, preserve_index=False)
    sink = pa.BufferOutputStream()
    with pa_ipc.new_stream(sink, table.schema) as writer:
        writer.write_table(table)
    buf = sink.getvalue()

    return StreamingResponse(
        io.BytesIO(buf.to_pybytes()),
        media_type=ARROW_MIME,
        headers={
            "Content-Disposition": f'inline; filename="{filename}"'
        },
    )
