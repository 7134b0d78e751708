from dotenv import load_dotenv
import os
import logging

load_dotenv()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Environment validation
required_env_vars = ["CHECKWX_API_KEY"]
missing_vars = [var for var in required_env_vars if not os.getenv(var)]

if missing_vars:
    logger.warning(f"Missing environment variables: {', '.join(missing_vars)}")
    logger.warning("Live METAR fetches will fail; /metar/decode still works")

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import PlainTextResponse
from models.metar import DecodedMetar, DecodeRequest
from services.metar_parser import InvalidInputError, parse_metar
from services.weather import WeatherAPIError, fetch_metar
from services.display import render_report

DEFAULT_STATION = os.getenv("DEFAULT_STATION", "CYTZ")

allowed_origins = os.getenv("ALLOWED_ORIGINS", "http://localhost:5173").split(",")
allowed_hosts = os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1").split(",")

app = FastAPI(
    title="METAR Decoder",
    description="Fetches METAR reports and decodes station, time, modifier and wind groups",
    version="1.0.0",
    docs_url="/docs" if os.getenv("ENVIRONMENT") != "production" else None,
    redoc_url="/redoc" if os.getenv("ENVIRONMENT") != "production" else None
)

# Security middleware
app.add_middleware(TrustedHostMiddleware, allowed_hosts=allowed_hosts)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "HEAD", "OPTIONS"],
    allow_headers=["*"],
)

@app.get("/")
@app.head("/")
def health():
    """Health check endpoint"""
    return {
        "status": "ok",
        "service": "METAR Decoder",
        "version": "1.0.0",
        "checkwx_configured": bool(os.getenv("CHECKWX_API_KEY")),
    }


def _decode(raw: str, status_code: int) -> DecodedMetar:
    try:
        return parse_metar(raw)
    except InvalidInputError as e:
        logger.error(f"❌ Could not decode METAR {raw!r}: {e}")
        raise HTTPException(status_code=status_code, detail=str(e))


def _fetch_and_decode(icao: str) -> DecodedMetar:
    logger.info(f"📡 Processing {icao}")
    try:
        raw = fetch_metar(icao)
    except WeatherAPIError as e:
        logger.error(f"❌ Weather error for {icao}: {e}")
        raise HTTPException(status_code=502, detail=str(e))
    # an upstream METAR that cannot be tokenized is a bad upstream payload
    return _decode(raw, 422)


@app.post("/metar/decode", response_model=DecodedMetar, response_model_exclude_none=True)
def decode_metar(req: DecodeRequest):
    return _decode(req.metar, 400)


@app.get("/metar", response_model=DecodedMetar, response_model_exclude_none=True)
def default_metar():
    """Latest decoded METAR for the default station."""
    return _fetch_and_decode(DEFAULT_STATION)


@app.get("/metar/{icao}", response_model=DecodedMetar, response_model_exclude_none=True)
def station_metar(icao: str):
    return _fetch_and_decode(icao)


@app.get("/metar/{icao}/text", response_class=PlainTextResponse)
def station_metar_text(icao: str):
    """Raw METAR followed by the decoded record, for plain text displays."""
    return render_report(_fetch_and_decode(icao))


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=os.getenv("HOST", "127.0.0.1"), port=int(os.getenv("PORT", "8000")))
