"""AI routes for the REST API."""
from fastapi import APIRouter, HTTPException, Depends, status

from api.dependencies import get_gateway
from api.schemas.requests import SummarizeTextRequest
from api.schemas.responses import SummarizeTextResponse, ConnectionTestResponse
from shared.exceptions import SummarizationInputError
from shared.summarizer import SummarizationGateway


router = APIRouter(prefix="/ai", tags=["ai"])


@router.post("/summarize", response_model=SummarizeTextResponse)
async def summarize_text(
    request: SummarizeTextRequest,
    gateway: SummarizationGateway = Depends(get_gateway)
):
    """Summarize arbitrary text."""
    try:
        result = await gateway.summarize(request.text, request.to_options())
    except SummarizationInputError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    return SummarizeTextResponse(
        summary=result.summary,
        keywords=result.keywords,
        quotes=result.quotes
    )


@router.get("/test", response_model=ConnectionTestResponse)
async def test_connection(gateway: SummarizationGateway = Depends(get_gateway)):
    """Check that the generative model is reachable."""
    return ConnectionTestResponse(**await gateway.test_connection())
