"""Google Analytics Data API reports and Measurement Protocol events."""

from googleapiclient.discovery import build
from google.oauth2 import service_account
import json
import logging
import uuid
import requests

from insightstream.config import settings
from insightstream.models.platform_schemas import CampaignAnalytics

logger = logging.getLogger(__name__)

ANALYTICS_SCOPES = ['https://www.googleapis.com/auth/analytics.readonly']
MEASUREMENT_PROTOCOL_URL = "https://www.google-analytics.com/mp/collect"
CAMPAIGN_METRICS = ('totalUsers', 'sessions', 'conversions', 'bounceRate', 'averageSessionDuration')


def build_analytics_service(credentials_json: str):
    """Build an Analytics Data API resource from a service-account JSON string."""
    info = json.loads(credentials_json)
    credentials = service_account.Credentials.from_service_account_info(info, scopes=ANALYTICS_SCOPES)
    return build('analyticsdata', 'v1beta', credentials=credentials, cache_discovery=False)


def fetch_campaign_analytics(credentials_json, property_id, campaign_name, service=None) -> CampaignAnalytics:
    """
    Report campaign metrics for the last 90 days.

    Args:
        credentials_json: Service-account key JSON, None when not configured
        property_id: GA4 property id
        campaign_name: Exact campaign name to filter on
        service: Prebuilt analyticsdata resource, mainly for tests

    Returns:
        CampaignAnalytics with zeros when there is no data; `error` is set on failure
    """
    if not credentials_json and service is None:
        return CampaignAnalytics(error="Google Analytics credentials are not configured in API Management.")

    try:
        service = service or build_analytics_service(credentials_json)
        response = service.properties().runReport(
            property=f"properties/{property_id}",
            body={
                'dateRanges': [{'startDate': '90daysAgo', 'endDate': 'today'}],
                'dimensions': [{'name': 'campaignName'}],
                'metrics': [{'name': name} for name in CAMPAIGN_METRICS],
                'dimensionFilter': {
                    'filter': {
                        'fieldName': 'campaignName',
                        'stringFilter': {'value': campaign_name, 'matchType': 'EXACT'},
                    }
                },
            }
        ).execute()
    except Exception as e:
        logger.error(f"Error calling Google Analytics API for campaign {campaign_name}: {e}")
        return CampaignAnalytics(error=f"Failed to fetch from Google Analytics: {e}")

    rows = response.get('rows') or []
    if not rows:
        logger.info(f"No Google Analytics data for campaign {campaign_name}")
        return CampaignAnalytics()

    # One row expected; metric values follow the request order
    metric_values = rows[0].get('metricValues') or []

    def metric(index):
        try:
            return float(metric_values[index].get('value') or 0)
        except (IndexError, ValueError, TypeError):
            return 0.0

    return CampaignAnalytics(
        total_users=metric(0),
        sessions=metric(1),
        conversions=metric(2),
        bounce_rate=metric(3),
        average_session_duration=metric(4),
    )


def send_session_start_event(utm_link, api_secret, measurement_id=None, session=None) -> bool:
    """
    Send a `session_start` event attributed to the link's campaign.

    Failures are logged and never raised.

    Returns:
        True if GA accepted the request
    """
    measurement_id = measurement_id or settings.GA_MEASUREMENT_ID
    if not measurement_id or not api_secret:
        logger.warning("Measurement Protocol not configured, skipping session_start event")
        return False

    payload = {
        'client_id': str(uuid.uuid4()),
        'events': [{
            'name': 'session_start',
            'params': {
                'campaign_source': utm_link.utm_source,
                'campaign_medium': utm_link.utm_medium,
                'campaign_name': utm_link.utm_campaign,
                'page_location': utm_link.generated_url,
            },
        }],
    }

    try:
        response = (session or requests).post(
            MEASUREMENT_PROTOCOL_URL,
            params={'measurement_id': measurement_id, 'api_secret': api_secret},
            json=payload,
            timeout=settings.HTTP_TIMEOUT_SECONDS
        )
    except requests.RequestException as e:
        logger.error(f"Failed to send Measurement Protocol event: {e}")
        return False

    if not response.ok:
        logger.error(f"Measurement Protocol request failed with status {response.status_code}: {response.text}")
        return False

    logger.info(f"Sent session_start event for campaign {utm_link.utm_campaign}")
    return True
