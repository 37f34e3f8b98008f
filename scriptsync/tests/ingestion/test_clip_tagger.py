"""Tests for response parsing and the tagging retry policy."""

import pytest

from scriptsync.exceptions import (
    AuthenticationException,
    ProviderException,
    TaggingException,
    ValidationException,
)
from scriptsync.ingestion import ClipTagger, parse_tagging_response
from scriptsync.tests.fakes import VALID_REPLY, FakeVisionProvider


class RateLimited(Exception):
    status_code = 429


class Forbidden(Exception):
    status_code = 403


@pytest.fixture
def frame_paths(tmp_path):
    paths = []
    for index in range(1, 6):
        path = tmp_path / f"frame_{index:04d}.jpg"
        path.write_bytes(b"jpeg-%d" % index)
        paths.append(path)
    return paths


class TestParseTaggingResponse:
    """Tests for parse_tagging_response."""

    def test_plain_json(self):
        result = parse_tagging_response(VALID_REPLY)
        assert result.description == "A dog runs along a sunny beach."
        assert result.tags == ["dog", "beach", "sunny"]

    @pytest.mark.parametrize("wrapped", [
        "```json\n" + VALID_REPLY + "\n```",
        "```JSON " + VALID_REPLY + "```",
        "```\n" + VALID_REPLY + "\n```",
        "\n  " + VALID_REPLY + "  \n",
    ])
    def test_strips_code_fences(self, wrapped):
        assert parse_tagging_response(wrapped).description == "A dog runs along a sunny beach."

    def test_tags_default_to_empty(self):
        assert parse_tagging_response('{"description": "Night city."}').tags == []

    def test_tags_filter_non_strings_and_blanks(self):
        result = parse_tagging_response(
            '{"description": "x", "tags": ["Wide Shot", 3, null, "  ", "  Golden Hour "]}'
        )
        assert result.tags == ["wide shot", "golden hour"]

    def test_non_list_tags_ignored(self):
        assert parse_tagging_response('{"description": "x", "tags": "dog"}').tags == []

    @pytest.mark.parametrize("reply", [
        '{"tags": ["a"]}',
        '{"description": "   ", "tags": ["a"]}',
        '{"description": 42}',
    ])
    def test_missing_or_empty_description(self, reply):
        with pytest.raises(ValidationException, match="empty description"):
            parse_tagging_response(reply)

    def test_unparseable_reply_includes_snippet(self):
        with pytest.raises(ValidationException) as exc_info:
            parse_tagging_response("Sorry, I cannot help with that.")
        assert "Sorry, I cannot help" in str(exc_info.value)
        assert exc_info.value.details["response_snippet"].startswith("Sorry")

    def test_json_array_rejected(self):
        with pytest.raises(ValidationException, match="not a JSON object"):
            parse_tagging_response('["dog"]')


class TestClipTagger:
    """Tests for ClipTagger retry behaviour."""

    async def test_success_first_attempt(self, frame_paths, sleep_mock):
        vision = FakeVisionProvider()
        result = await ClipTagger(vision).tag(frame_paths)

        assert result.tags == ["dog", "beach", "sunny"]
        assert len(vision.calls) == 1
        assert vision.calls[0] == [p.read_bytes() for p in frame_paths]
        sleep_mock.assert_not_awaited()

    async def test_auth_failure_is_not_retried(self, frame_paths, sleep_mock):
        vision = FakeVisionProvider([AuthenticationException("invalid_api_key", status_code=401)])

        with pytest.raises(AuthenticationException):
            await ClipTagger(vision).tag(frame_paths)

        assert len(vision.calls) == 1
        sleep_mock.assert_not_awaited()

    @pytest.mark.parametrize("error", [
        Forbidden("forbidden"),
        ProviderException("permission_error: key lacks vision access"),
    ])
    async def test_other_auth_signals_are_not_retried(self, frame_paths, error):
        vision = FakeVisionProvider([error, VALID_REPLY])
        with pytest.raises(type(error)):
            await ClipTagger(vision).tag(frame_paths)
        assert len(vision.calls) == 1

    async def test_transient_failures_then_success(self, frame_paths, sleep_mock):
        vision = FakeVisionProvider([RateLimited("slow down"), ProviderException("timeout"), VALID_REPLY])

        result = await ClipTagger(vision).tag(frame_paths)

        assert result.description == "A dog runs along a sunny beach."
        assert len(vision.calls) == 3
        assert [call.args[0] for call in sleep_mock.await_args_list] == [2.0, 4.0]

    async def test_exhausted_retries_raise_last_error(self, frame_paths, sleep_mock):
        vision = FakeVisionProvider([
            ProviderException("first"),
            ProviderException("second"),
            ProviderException("third"),
        ])

        with pytest.raises(ProviderException, match="third"):
            await ClipTagger(vision).tag(frame_paths)

        assert len(vision.calls) == 3
        assert sleep_mock.await_count == 2

    async def test_bad_output_and_empty_reply_are_retried(self, frame_paths, sleep_mock):
        vision = FakeVisionProvider(["not json", "", VALID_REPLY])

        result = await ClipTagger(vision).tag(frame_paths)

        assert result.tags
        assert len(vision.calls) == 3

    async def test_custom_attempts_and_base_delay(self, frame_paths, sleep_mock):
        vision = FakeVisionProvider([ProviderException("boom")])
        tagger = ClipTagger(vision, max_attempts=4, base_delay_seconds=0.5)

        with pytest.raises(ProviderException):
            await tagger.tag(frame_paths)

        assert len(vision.calls) == 4
        assert [call.args[0] for call in sleep_mock.await_args_list] == [0.5, 1.0, 2.0]

    async def test_zero_frames_fails_without_calling_model(self, sleep_mock):
        vision = FakeVisionProvider()

        with pytest.raises(TaggingException, match="No frames available for tagging"):
            await ClipTagger(vision).tag([])

        assert vision.calls == []
        sleep_mock.assert_not_awaited()

    async def test_sends_at_most_cap_frames(self, tmp_path):
        paths = []
        for index in range(1, 51):
            path = tmp_path / f"frame_{index:04d}.jpg"
            path.write_bytes(b"%d" % index)
            paths.append(path)

        vision = FakeVisionProvider()
        await ClipTagger(vision, max_frames_per_call=20).tag(paths)

        sent = vision.calls[0]
        assert len(sent) == 20
        assert sent[-1] == b"50"
