"""LeetCode API integration tools."""

from typing import Any, Dict, List, Optional
import httpx
import structlog
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from .base import Tool, ToolError
from .html_cleanup import clean_html
from ..protocol.values import ShapeError, expect_object, get_bool, get_string

logger = structlog.get_logger()

DEFAULT_BASE_URL = "https://leetcode.com"
DEFAULT_GRAPHQL_URL = "https://leetcode.com/graphql"
DEFAULT_USER_AGENT = "LeetCode-MCP-Server/1.0"

DAILY_CHALLENGE_QUERY = """
{
    activeDailyCodingChallengeQuestion {
        date
        userStatus
        link
        question {
            questionId
            questionFrontendId
            title
            titleSlug
            content
            difficulty
            stats
        }
    }
}"""


class LeetCodeAPIError(ToolError):
    """LeetCode API specific error."""
    pass


def create_http_client(config: Optional[Dict[str, Any]] = None) -> httpx.Client:
    """Create the HTTP client shared by LeetCode tools."""
    config = config or {}
    timeout = config.get("timeout", 30.0)
    return httpx.Client(
        timeout=httpx.Timeout(timeout, connect=config.get("connect_timeout", 10.0)),
        headers={
            "Content-Type": "application/json",
            "User-Agent": config.get("user_agent", DEFAULT_USER_AGENT),
        },
    )


class LeetCodeDailyChallengeTool(Tool):
    """Fetch the active LeetCode daily coding challenge."""

    result_heading = "LeetCode Daily Challenge retrieved successfully:"

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        client: Optional[httpx.Client] = None
    ):
        super().__init__(config)
        self.client = client
        self._owns_client = client is None
        self.base_url = self.config.get("base_url", DEFAULT_BASE_URL).rstrip("/")
        self.graphql_url = self.config.get("graphql_url", DEFAULT_GRAPHQL_URL)
        self._retrying = Retrying(
            stop=stop_after_attempt(self.config.get("retry_attempts", 3)),
            wait=wait_exponential(
                multiplier=self.config.get("retry_multiplier", 1.0),
                min=0,
                max=self.config.get("retry_max_wait", 5.0),
            ),
            retry=retry_if_exception_type(httpx.TransportError),
            reraise=True,
        )

    @property
    def name(self) -> str:
        return "get_leetcode_daily_challenge"

    @property
    def description(self) -> str:
        return (
            "Fetches today's LeetCode daily challenge problem with title, "
            "difficulty, and description"
        )

    @property
    def input_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "include_content": {
                    "type": "boolean",
                    "description": "Whether to include the full problem description (default: true)"
                }
            }
        }

    def _initialize_impl(self) -> None:
        if self.client is None:
            self.client = create_http_client(self.config)
            self._owns_client = True

    def _cleanup_impl(self) -> None:
        if self.client is not None and self._owns_client:
            self.client.close()
            self.client = None

    def execute(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        include_content = get_bool(arguments, "include_content", default=True)
        challenge = self._fetch_daily_challenge()
        return self._build_result(challenge, include_content)

    def _post_query(self) -> httpx.Response:
        return self.client.post(self.graphql_url, json={"query": DAILY_CHALLENGE_QUERY})

    def _fetch_daily_challenge(self) -> Dict[str, Any]:
        """POST the GraphQL query and return the challenge object."""
        try:
            response = self._retrying(self._post_query)
        except httpx.HTTPError as e:
            logger.error("LeetCode request failed", error=str(e))
            raise LeetCodeAPIError(f"Failed to make request: {e}") from e

        if response.status_code != httpx.codes.OK:
            logger.error("LeetCode API error", status_code=response.status_code)
            raise LeetCodeAPIError(f"LeetCode API returned status {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            raise LeetCodeAPIError(f"Failed to decode response: {e}") from e

        try:
            body = expect_object(payload, "response")
            data = body.get("data")
            if not data and body.get("errors"):
                raise LeetCodeAPIError(
                    f"LeetCode API returned errors: {self._error_messages(body['errors'])}"
                )
            data = expect_object(data, "data")
            return expect_object(
                data.get("activeDailyCodingChallengeQuestion"),
                "data.activeDailyCodingChallengeQuestion"
            )
        except ShapeError as e:
            raise LeetCodeAPIError(f"Unexpected response shape: {e}") from e

    @staticmethod
    def _error_messages(errors: Any) -> str:
        messages: List[str] = []
        if isinstance(errors, list):
            for error in errors:
                if isinstance(error, dict) and isinstance(error.get("message"), str):
                    messages.append(error["message"])
        return "; ".join(messages) or str(errors)

    def _build_result(self, challenge: Dict[str, Any], include_content: bool) -> Dict[str, Any]:
        question = expect_object(challenge.get("question") or {}, "question")

        result = {
            "date": get_string(challenge, "date", ""),
            "title": get_string(question, "title", ""),
            "difficulty": get_string(question, "difficulty", ""),
            "link": f"{self.base_url}{get_string(challenge, 'link', '')}",
            "problem_id": get_string(question, "questionFrontendId", ""),
        }

        content = get_string(question, "content", "")
        if include_content and content:
            result["description"] = clean_html(content)

        return result
