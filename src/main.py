from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import ValidationError

from logger import logger
from config.config import settings
from account.authentication import NotAuthenticated
from dashboard.templating import STATIC_DIR, redirect, render, error
from dashboard.routers import auth, home, properties, leads, banners, headings, blog, green, api
from dashboard.routers import settings as settings_page
from gcp.backend import build_backend


@asynccontextmanager
async def lifespan(app: FastAPI):
    # tests install their own backend before startup
    if getattr(app.state, 'backend', None) is None:
        app.state.backend = build_backend()
    logger.info(f"[MAIN] {settings.General.APP_NAME} started")
    yield


# Initialize FastAPI app
app = FastAPI(title=settings.General.APP_NAME, lifespan=lifespan)

app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

INVALID_INPUT_MESSAGE = "Some of the submitted values could not be read. Please go back and check the form."


def _wants_json(request: Request) -> bool:
    return request.url.path.startswith("/api") or "application/json" in request.headers.get("accept", "")


@app.exception_handler(NotAuthenticated)
async def not_authenticated_handler(request: Request, exc: NotAuthenticated):
    logger.info(f"[MAIN] Unauthenticated request to {request.url.path}, redirecting to sign in")
    return redirect(settings.Authentication.LOGIN_ROUTE)


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.exception(exc)
    if _wants_json(request):
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": str(exc)}
        )
    return render(request, "error.html", {'message': INVALID_INPUT_MESSAGE}, status_code=status.HTTP_400_BAD_REQUEST)

@app.exception_handler(ValidationError)
async def validation_exception_handler(request: Request, exc: ValidationError):
    logger.exception(exc)
    if _wants_json(request):
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": str(exc)}
        )
    return render(request, "error.html", {'message': INVALID_INPUT_MESSAGE}, status_code=status.HTTP_400_BAD_REQUEST)

@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    logger.warning(f"[MAIN] HTTP {exc.status_code} on {request.url.path}: {exc.detail}")
    if _wants_json(request):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail}
        )
    return render(request, "error.html", {'message': exc.detail}, status_code=exc.status_code)

@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.exception(exc)
    if _wants_json(request):
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": str(exc)}
        )
    return render(
        request,
        "error.html",
        {'message': "Something went wrong. Please try again."},
        notifications=[error("Unexpected error", str(exc))],
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE
    )


app.include_router(auth.router, tags=["auth"])
app.include_router(api.router, prefix="/api", tags=["api"])
app.include_router(home.router, prefix="/dashboard", tags=["dashboard"])
app.include_router(properties.router, prefix="/dashboard/properties", tags=["properties"])
app.include_router(leads.router, prefix="/dashboard/leads", tags=["leads"])
app.include_router(banners.router, prefix="/dashboard/banners", tags=["banners"])
app.include_router(headings.router, prefix="/dashboard/headings", tags=["headings"])
app.include_router(blog.router, prefix="/dashboard/blog", tags=["blog"])
app.include_router(green.router, prefix="/dashboard/go-green", tags=["go-green"])
app.include_router(settings_page.router, prefix="/dashboard/settings", tags=["settings"])


if __name__ == '__main__':
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8080, reload=True)
