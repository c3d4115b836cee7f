import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse
from routers import rounds, verify
from deps.settings import LOG_LEVEL
from services.errors import FairnessError

logger = logging.getLogger("uvicorn.error")
logger.setLevel(LOG_LEVEL)

app = FastAPI(title="Plinko API (Provably Fair)")

# Routers
app.include_router(rounds.router)
app.include_router(verify.router)


@app.exception_handler(FairnessError)
async def fairness_error_handler(request: Request, exc: FairnessError):
    logger.info(f"{request.method} {request.url.path} rechazado: {exc.code}: {exc}")
    return JSONResponse(status_code=400, content={"detail": str(exc), "code": exc.code})


@app.get("/", include_in_schema=False)
def root():
    return RedirectResponse(url="/docs")

@app.get("/healthz")
def healthz():
    return {"ok": True}
