from fastapi import APIRouter

from ..config import get_public_config

router = APIRouter()


@router.get("/")
async def read_public_config():
    return {"config": get_public_config()}

# Also respond to '/config' (no trailing slash) to avoid 307s and proxy issues
@router.get("")
async def read_public_config_no_slash():
    return {"config": get_public_config()}
