"""Prompt templates for the AI flows."""

from typing import List, Optional

from insightstream.models.ai_schemas import (
    AnalyzeVideoTextInput,
    GeneralQueryInput,
    SuggestContentImprovementsInput,
    ChannelReportInput,
    InstagramReportInput,
)

NO_FILTER_CONTEXT = "No specific filters applied."


def _bullets(lines: List[str], empty: str) -> str:
    return "\n".join(lines) if lines else empty


def _filter_context(value: Optional[str]) -> str:
    return value or NO_FILTER_CONTEXT


VIDEO_TEXT_ANALYSIS = """You are an expert YouTube content analyst. Analyze the provided video title, description, and comments.

Video Title: {title}
Video Description: {description}

Comments:
{comments}

Respond with a JSON object containing:
1. "overall_sentiment": sentiment of the comments section, one of "positive", "negative", "neutral", "mixed".
2. "sentiment_summary": 2-3 sentences explaining the sentiment and key themes in the comments. If there are no comments, say so.
3. "top_positive_keywords": up to 5 keywords from comments indicating positive reactions, or an empty array.
4. "top_negative_keywords": up to 5 keywords from comments indicating negative reactions or criticism, or an empty array.
5. "identified_topics": up to 5 distinct topics prominent in the title, description and comments.
6. "content_suggestions": up to 3 short, actionable suggestions for improving similar future content or engagement.

Focus on common patterns. If comments are sparse or uninformative, reflect that in the summary and suggestions.
"""


def video_text_analysis(data: AnalyzeVideoTextInput) -> str:
    comments = [
        f'- Author: {c.author_display_name}, Comment: "{c.text_display}" '
        f'(Likes: {c.like_count}, Replies: {c.total_reply_count})'
        for c in data.comments
    ]
    return VIDEO_TEXT_ANALYSIS.format(
        title=data.title,
        description=data.description or "N/A",
        comments=_bullets(comments, "No comments provided for analysis."),
    )


GENERAL_QUERY = """You are InsightStreamBot, a helpful AI assistant specialized in social media strategy and content optimization.
The user's role is: {user_role}.

The user's question or request is:
"{user_query}"

Recent YouTube performance (use it only if relevant to the question):
{youtube}

Recent Instagram performance (use it only if relevant to the question):
{instagram}

Give a clear, insightful and actionable answer to the user's query. If they ask for suggestions, base them on the data above.
Be friendly, professional and encouraging. Use bullet points or numbered lists where it helps readability.
Respond with a JSON object with a single string field "ai_response".
"""


def general_query(data: GeneralQueryInput) -> str:
    youtube = [
        f'- Title: "{v.title}", Views: {v.views}, Likes: {v.likes}, Comments: {v.comments}'
        for v in data.youtube_data or []
    ]
    instagram = [
        f'- Caption: "{p.caption}", Likes: {p.likes}, Comments: {p.comments}, Timestamp: {p.timestamp}'
        for p in data.instagram_data or []
    ]
    return GENERAL_QUERY.format(
        user_role=data.user_role,
        user_query=data.user_query,
        youtube=_bullets(youtube, "(No YouTube data was provided for this query.)"),
        instagram=_bullets(instagram, "(No Instagram data was provided for this query.)"),
    )


CONTENT_IMPROVEMENTS = """You are a social media expert providing suggestions to improve content, engagement, and reach.

Analyze the YouTube and Instagram data below and generate specific, clear suggestions that are easy to implement.
Consider the user's role when making suggestions.

User Role: {user_role}

YouTube Data:
{youtube}

Instagram Data:
{instagram}

Respond with a JSON object {{"suggestions": [...]}} where each suggestion has
"platform" ("youtube" or "instagram"), "type" (e.g. "title", "thumbnail", "posting time") and "description".
"""


def content_improvements(data: SuggestContentImprovementsInput) -> str:
    youtube = [
        f"- Title: {v.title}, Likes: {v.likes}, Comments: {v.comments}, Shares: {v.shares}"
        for v in data.youtube_data
    ]
    instagram = [
        f"- Thumbnail: {p.thumbnail}, Likes: {p.likes}, Comments: {p.comments}, Timestamp: {p.timestamp}"
        for p in data.instagram_data
    ]
    return CONTENT_IMPROVEMENTS.format(
        user_role=data.user_role,
        youtube=_bullets(youtube, "(none)"),
        instagram=_bullets(instagram, "(none)"),
    )


REPORT_FIELDS = """Respond with a JSON object containing:
1. "report_title": a concise, informative title for this report.
2. "overall_performance_summary": 2-4 sentences on overall performance and any apparent trends.
3. "key_observations": up to 5 key observations (content themes, engagement patterns, age vs. performance).
4. "{top_field}": up to 3 top performers, each with {top_keys} and an optional short "reason". Judge on a combination of metrics, not just one.
5. "areas_for_improvement": up to 3 areas to improve, based on underperformers or missed opportunities.
6. "actionable_suggestions": up to 3 specific suggestions for future content, promotion or engagement.

Be data-driven. If the data is limited, acknowledge that in the summary.
"""

CHANNEL_REPORT = """You are an expert YouTube Channel Analyst. Analyze the videos below and generate a concise analytics report.

Current Filter/Sort Context: {filter_context}

Video Data:
{videos}

"""


def channel_report(data: ChannelReportInput) -> str:
    videos = [
        f'- Title: "{v.title}" (ID: {v.id})\n'
        f"  Published: {v.published_at}\n"
        f"  Views: {v.views}\n"
        f"  Likes: {v.likes}\n"
        f"  Comments: {v.comments}\n"
        f"  Description: {v.description or 'N/A'}"
        for v in data.videos
    ]
    return CHANNEL_REPORT.format(
        filter_context=_filter_context(data.filter_context),
        videos="\n".join(videos),
    ) + REPORT_FIELDS.format(
        top_field="top_performing_videos",
        top_keys='"id", "title", "views", "likes", "comments"',
    )


INSTAGRAM_REPORT = """You are an expert Instagram Analyst. Analyze the reels below and generate a concise analytics report.

Current Filter/Sort Context: {filter_context}

Reel Data:
{reels}

"""


def instagram_report(data: InstagramReportInput) -> str:
    reels = [
        f'- Caption: "{r.caption or "N/A"}" (ID: {r.id}, User: @{r.username or "unknown"})\n'
        f"  Posted: {r.posted_at}\n"
        f"  Plays: {r.play_count}\n"
        f"  Likes: {r.likes}\n"
        f"  Comments: {r.comments}\n"
        f"  Reshares: {r.reshare_count or 0}\n"
        f"  URL: {r.reel_url}"
        for r in data.reels
    ]
    return INSTAGRAM_REPORT.format(
        filter_context=_filter_context(data.filter_context),
        reels="\n".join(reels),
    ) + REPORT_FIELDS.format(
        top_field="top_performing_reels",
        top_keys='"id", "reel_url", "caption", "username", "play_count", "likes", "comments", "reshare_count"',
    )
