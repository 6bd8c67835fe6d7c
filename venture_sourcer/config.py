"""Configuration for the Venture Sourcer pipeline.

All provider credentials and endpoints are read from the environment
(optionally via a .env file). A missing credential is never an error:
each component degrades to its documented fallback.
"""

import os
from dotenv import load_dotenv

load_dotenv()

# ============================================================================
# Provider credentials
# ============================================================================

OPENROUTER_API_KEY = os.getenv('OPENROUTER_API_KEY')
PERPLEXITY_API_KEY = os.getenv('PERPLEXITY_API_KEY')
APOLLO_API_KEY = os.getenv('APOLLO_API_KEY')

# ============================================================================
# Language-model provider (OpenRouter, OpenAI-compatible)
# ============================================================================

OPENROUTER_BASE_URL = os.getenv('OPENROUTER_BASE_URL', 'https://openrouter.ai/api/v1')
OPENROUTER_MODEL = os.getenv('OPENROUTER_MODEL', 'anthropic/claude-3.5-haiku')
OPENROUTER_HEADERS = {
    'HTTP-Referer': os.getenv('OPENROUTER_REFERER', 'https://venture-strategy-solutions.com'),
    'X-Title': os.getenv('OPENROUTER_TITLE', 'Venture Sourcer'),
}

# ============================================================================
# Web-research provider (Perplexity, OpenAI-compatible)
# ============================================================================

PERPLEXITY_BASE_URL = os.getenv('PERPLEXITY_BASE_URL', 'https://api.perplexity.ai')
PERPLEXITY_MODEL = os.getenv('PERPLEXITY_MODEL', 'sonar')

# ============================================================================
# Directory provider (Apollo)
# ============================================================================

APOLLO_ORG_SEARCH_URL = "https://api.apollo.io/v1/organizations/search"
APOLLO_COMPANY_LOOKUP_URL = "https://api.apollo.io/api/v1/mixed_companies/search"
APOLLO_PEOPLE_SEARCH_URL = "https://api.apollo.io/api/v1/mixed_people/search"
APOLLO_MATCH_URL = "https://api.apollo.io/v1/people/match"
APOLLO_HEALTH_URL = "https://api.apollo.io/v1/auth/health"

# Seconds, applied to every outbound HTTP call
REQUEST_TIMEOUT = float(os.getenv('REQUEST_TIMEOUT', '30'))

# Apollo returns this inside the email field for contacts that were not revealed
EMAIL_LOCKED_SENTINEL = 'email_not_unlocked'

# Authorization / quota failures ("Insufficient credits", "Upgrade plan")
APOLLO_QUOTA_STATUS_CODES = (403, 422)

COMPANY_SEARCH_PAGE_SIZE = 25
RESEARCH_MAX_COMPANIES = 10

# People search
VALID_PEOPLE_LIMITS = (10, 15, 25, 50, 100)
DEFAULT_PEOPLE_LIMIT = 100
DEFAULT_SENIORITIES = ['founder', 'c_suite', 'vp', 'director', 'manager', 'senior']

# ============================================================================
# Enumerations
# ============================================================================

SIZE_BUCKETS = [
    '1-10', '11-50', '51-200', '201-500', '501-1000',
    '1001-5000', '5001-10000', '10000+',
]

FUNDING_STAGES = ['seed', 'series_a', 'series_b', 'series_c', 'funded']

SENIORITIES = [
    'owner', 'founder', 'c_suite', 'partner', 'vp', 'head',
    'director', 'manager', 'senior', 'entry', 'intern',
]

# Phrases that mark a research answer as "nothing found"; matched lowercase
RESEARCH_DECLINE_PHRASES = (
    'no additional information found',
    "couldn't find",
    'could not find',
    "i don't have",
    'unable to find',
)

# ============================================================================
# Outreach context
# ============================================================================

SENDER_ORG_NAME = os.getenv('SENDER_ORG_NAME', 'Venture Strategy Solutions')
SENDER_ORG_CONTEXT = os.getenv(
    'SENDER_ORG_CONTEXT',
    "Venture Strategy Solutions is a student-led organization at Berkeley that "
    "provides technology and strategy consulting services targeted towards "
    "startups. We've worked with leading companies like Figma, Niantic and Lime "
    "and provide exceptional work for whatever a startup may need help with."
)

# ============================================================================
# Outbound email (SMTP)
# ============================================================================

SMTP_SERVER = os.getenv('SMTP_SERVER', 'smtp.gmail.com')
SMTP_PORT = int(os.getenv('SMTP_PORT', '587'))
EMAIL_ADDRESS = os.getenv('EMAIL_ADDRESS')
EMAIL_APP_PASSWORD = os.getenv('EMAIL_APP_PASSWORD')
EMAIL_SEND_AS = os.getenv('EMAIL_SEND_AS', EMAIL_ADDRESS)
