"""AI analysis, reports and the rate-limited assistant chat."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from insightstream.ai import flows
from insightstream.ai.client import FlowError
from insightstream.database import get_db
from insightstream.models.user import User
from insightstream.models.ai_schemas import (
    AnalyzeVideoTextInput,
    VideoTextAnalysis,
    GeneralQueryInput,
    SuggestContentImprovementsInput,
    SuggestContentImprovementsOutput,
    ChannelReportInput,
    ChannelAnalyticsReport,
    InstagramReportInput,
    InstagramAnalyticsReport,
    ChatUsageStatus,
    ChatQueryResponse,
)
from insightstream.middleware.auth import get_current_user

router = APIRouter()


def _bad_gateway(error: FlowError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(error))


@router.post("/analyze-video", response_model=VideoTextAnalysis)
def analyze_video(
    data: AnalyzeVideoTextInput,
    current_user: User = Depends(get_current_user)
):
    try:
        return flows.analyze_video_text(data)
    except FlowError as e:
        raise _bad_gateway(e)


@router.post("/query", response_model=ChatQueryResponse)
def chat_query(
    data: GeneralQueryInput,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Ask the assistant a question.

    Each call counts against the user's rolling chat allowance; the model is
    only called when the message was allowed.
    """
    usage = flows.check_chat_usage(db, current_user.id)
    if usage.error:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=usage.error)
    if not usage.allowed:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=f"Daily chat limit of {usage.daily_limit} messages reached."
        )

    data = data.model_copy(update={"user_role": current_user.role})
    try:
        output = flows.general_query(data)
    except FlowError as e:
        raise _bad_gateway(e)

    return ChatQueryResponse(ai_response=output.ai_response, usage=usage)


@router.get("/chat-usage", response_model=ChatUsageStatus)
def chat_usage(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return flows.get_chat_usage_status(db, current_user.id)


@router.post("/suggestions", response_model=SuggestContentImprovementsOutput)
def content_suggestions(
    data: SuggestContentImprovementsInput,
    current_user: User = Depends(get_current_user)
):
    try:
        return flows.suggest_content_improvements(data)
    except FlowError as e:
        raise _bad_gateway(e)


@router.post("/reports/channel", response_model=ChannelAnalyticsReport)
def channel_report(
    data: ChannelReportInput,
    current_user: User = Depends(get_current_user)
):
    try:
        return flows.generate_channel_analytics_report(data)
    except FlowError as e:
        raise _bad_gateway(e)


@router.post("/reports/instagram", response_model=InstagramAnalyticsReport)
def instagram_report(
    data: InstagramReportInput,
    current_user: User = Depends(get_current_user)
):
    try:
        return flows.generate_instagram_analytics_report(data)
    except FlowError as e:
        raise _bad_gateway(e)
