from fastapi import APIRouter, Depends

from pulsehustle.api.deps import respond
from pulsehustle.platform import Platform, get_platform
from pulsehustle.services.stats import PlatformStatsResponse

router = APIRouter()


@router.get("")
async def get_stats(platform: Platform = Depends(get_platform)):
    result = await platform.operations.run(platform.stats.get_platform_stats, label="Stats retrieval")
    return respond(result, PlatformStatsResponse)
