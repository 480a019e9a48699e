from __future__ import annotations

"""
FastAPI application: keyword -> product, product -> affiliate link,
affiliate link -> campaign (ad copy + narrated video + post text).

- Every upstream-calling endpoint fails fast on missing credentials
- ServiceError subclasses render as {error, detail} with their own status
- Generated videos are served from /videos
"""

from typing import Any, Dict

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from loguru import logger

from ._singletons import (
    get_ali_client,
    get_campaign_composer,
    get_openai_client,
    get_settings,
)
from .affiliate import generate_affiliate_link
from .aliexpress import AliExpressClient
from .campaign import CampaignComposer
from .config import (
    LINK_VIA,
    SCORE_DECIMALS,
    VIDEO_URL_PREFIX,
    AffiliateLinkRequest,
    AffiliateLinkResponse,
    AliDebugRequest,
    CampaignAssets,
    CampaignInputs,
    CampaignRequest,
    CampaignResponse,
    FindByNameRequest,
    FindByNameResponse,
    HealthResponse,
    VideoInfo,
    ViralIdeaRequest,
    ViralIdeaResponse,
    configure_logging,
)
from .errors import IdeaNotFoundError, InvalidRequestError, ServiceError
from .openai_client import OpenAIClient
from .search import debug_search, find_by_name


# -----------------------
# FastAPI app + startup
# -----------------------

app = FastAPI(title="ali-campaign")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# same Settings instance the encoder dependency receives; created at startup
app.mount(
    VIDEO_URL_PREFIX,
    StaticFiles(directory=str(get_settings().video_dir), check_dir=False),
    name="videos",
)


@app.on_event("startup")
def startup_event() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    settings.video_dir.mkdir(parents=True, exist_ok=True)
    settings.tmp_dir.mkdir(parents=True, exist_ok=True)
    presence = settings.credential_presence()
    if not (presence["APP_KEY"] and presence["APP_SECRET"]):
        logger.warning("AliExpress credentials incomplete: {}", presence)
    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY not set; campaign and idea endpoints will fail")
    logger.info("Gateway {} ({}/{}/{})", settings.api_gateway, settings.target_language,
                settings.target_currency, settings.ship_to_country)


@app.exception_handler(ServiceError)
def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    logger.error("{} failed: {}", request.url.path, exc)
    return JSONResponse(status_code=exc.status_code, content=exc.payload())


@app.exception_handler(RequestValidationError)
def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    detail = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ())[1:]) or 'body'}: {err.get('msg')}"
        for err in exc.errors()
    )
    return JSONResponse(status_code=400, content={"error": "invalid_request", "detail": detail})


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="ok")


# -----------------------
# Product search
# -----------------------

@app.post("/api/find-by-name", response_model=FindByNameResponse, response_model_exclude_none=True)
def find_product(
    req: FindByNameRequest,
    client: AliExpressClient = Depends(get_ali_client),
) -> FindByNameResponse:
    keyword = req.keyword.strip()
    if not keyword:
        raise InvalidRequestError("Missing keyword")

    outcome = find_by_name(client, keyword)
    if not outcome.found:
        return FindByNameResponse(found=0, reason=outcome.reason)
    return FindByNameResponse(
        found=1,
        url=outcome.candidate.url,
        title=outcome.candidate.title,
        score=round(outcome.score or 0.0, SCORE_DECIMALS),
    )


@app.post("/api/ali-debug")
def ali_debug(
    req: AliDebugRequest,
    client: AliExpressClient = Depends(get_ali_client),
) -> Dict[str, Any]:
    return {"primary": debug_search(client, req.keywords)}


# -----------------------
# Affiliate links
# -----------------------

@app.post("/api/make-affiliate-link", response_model=AffiliateLinkResponse)
def make_affiliate_link(
    req: AffiliateLinkRequest,
    client: AliExpressClient = Depends(get_ali_client),
) -> AffiliateLinkResponse:
    link_set = generate_affiliate_link(client, req.product_url.strip())
    return AffiliateLinkResponse(link=link_set.best, via=LINK_VIA, is_affiliate=link_set.is_affiliate)


# -----------------------
# Generative endpoints
# -----------------------

@app.post("/api/viral-idea", response_model=ViralIdeaResponse)
def viral_idea(
    req: ViralIdeaRequest,
    ai: OpenAIClient = Depends(get_openai_client),
) -> ViralIdeaResponse:
    idea = ai.viral_idea(req.exclude)
    if not idea:
        raise IdeaNotFoundError("Failed to get idea")
    return ViralIdeaResponse(idea=idea)


@app.post("/api/make-campaign", response_model=CampaignResponse)
def make_campaign(
    req: CampaignRequest,
    composer: CampaignComposer = Depends(get_campaign_composer),
) -> CampaignResponse:
    artifact = composer.build(
        affiliate_url=req.affiliate_url,
        title=req.product_title,
        image_url_hint=req.image_url_hint,
        brief=req.brief,
    )
    return CampaignResponse(
        ok=True,
        inputs=CampaignInputs(
            affiliate_url=req.affiliate_url,
            product_title=req.product_title,
            brief=req.brief,
            image_url_detected=artifact.image_url,
        ),
        assets=CampaignAssets(
            image_data_url_content_type=artifact.image_content_type,
            image_data_url_preview=artifact.image_preview,
        ),
        ad_copy=artifact.ad_copy,
        video=VideoInfo(video_url=artifact.video_url),
        social_post=artifact.social_post,
    )
