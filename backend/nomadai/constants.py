"""Application-wide constants."""


class EventType:
    """Event type strings sent by the SDK."""
    CLICK = "click"
    TAP = "tap"
    PAGE_VIEW = "page_view"
    PAGEVIEW = "pageview"
    NAVIGATION = "navigation"
    ROUTE_CHANGE = "route_change"
    MUTATION = "mutation"
    DOM_CHANGE = "dom_change"
    CONSOLE = "console"


CLICK_TYPES = frozenset({EventType.CLICK, EventType.TAP})
PAGE_VIEW_TYPES = frozenset({EventType.PAGE_VIEW, EventType.PAGEVIEW})
NAVIGATION_TYPES = frozenset({
    EventType.NAVIGATION,
    EventType.PAGE_VIEW,
    EventType.PAGEVIEW,
    EventType.ROUTE_CHANGE,
})
MUTATION_TYPES = frozenset({EventType.MUTATION, EventType.DOM_CHANGE})


class IssueType:
    """Issue type constants."""
    RAGE_CLICK = "rage_click"
    DEAD_CLICK = "dead_click"


class Severity:
    """Issue severity constants."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# Element key for clicks captured without a selector
UNKNOWN_ELEMENT = "unknown"

# Rage-click detection
RAGE_CLICK_WINDOW_SIZE = 4
RAGE_CLICK_MAX_SPAN_MS = 2000
RAGE_CLICK_HIGH_THRESHOLD = 8
RAGE_CLICK_MEDIUM_THRESHOLD = 4

# Dead-click detection
DEAD_CLICK_RESPONSE_WINDOW_MS = 1000

# Dashboard listing
DEFAULT_PAGE_LIMIT = 100
MAX_SESSION_PAGE_LIMIT = 500
