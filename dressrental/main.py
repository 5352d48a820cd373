import logging

from fastapi import FastAPI

from dressrental.api.v1.availability import router as availability_router
from dressrental.api.v1.contracts import router as contracts_router
from dressrental.core.config import settings


class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in ("contract_number", "dress_id", "mode", "status", "reason", "error"):
            value = getattr(record, key, None)
            if value not in (None, ""):
                extras.append(f"{key}={value}")
        base = super().format(record)
        if extras:
            return f"{base} | " + " ".join(extras)
        return base


handler = logging.StreamHandler()
handler.setFormatter(ContextFormatter("%(levelname)s:%(name)s:%(message)s"))

root = logging.getLogger()
root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
root.handlers.clear()
root.addHandler(handler)

app = FastAPI(title="Dress Rental Contract Engine", version="0.1.0")

app.include_router(contracts_router, prefix="/api/v1", tags=["contracts"])
app.include_router(availability_router, prefix="/api/v1", tags=["availability"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
