import asyncio

import pytest

from finvest_server.cache.media_cache import MediaCache
from finvest_server.providers.http import ProviderError
from finvest_server.services.video_service import (
    GoalVideoService,
    VideoJobStatus,
    split_image_data,
)

DONE_WITH_VIDEO = {
    "name": "operations/op-1",
    "done": True,
    "response": {"generateVideoResponse": {"generatedSamples": [{"video": {"uri": "https://files/v1?alt=media"}}]}},
}


class _FakeVideoClient:
    def __init__(self, statuses: list[dict], download_error: Exception | None = None) -> None:
        self.statuses = list(statuses)
        self.download_error = download_error
        self.submissions: list[tuple] = []
        self.status_checks: list[str] = []
        self.downloads: list[str] = []

    def predict_long_running(self, model, instance, parameters):
        self.submissions.append((model, instance, parameters))
        return {"name": "operations/op-1", "done": False}

    def get_operation(self, name):
        self.status_checks.append(name)
        return self.statuses.pop(0)

    def download(self, uri):
        self.downloads.append(uri)
        if self.download_error:
            raise self.download_error
        return b"\x00\x01mp4", "video/mp4"


def _service(client, max_poll_attempts: int = 120, sleeps: list[float] | None = None) -> GoalVideoService:
    recorded = sleeps if sleeps is not None else []

    async def fake_sleep(seconds: float) -> None:
        recorded.append(seconds)

    return GoalVideoService(
        lambda: client,
        "video-model",
        MediaCache(),
        poll_interval_seconds=5.0,
        max_poll_attempts=max_poll_attempts,
        sleep=fake_sleep,
    )


def test_split_image_data_strips_prefix_and_keeps_mime() -> None:
    assert split_image_data("data:image/jpg;base64,QUJD") == ("image/jpeg", "QUJD")
    assert split_image_data("data:image/png;base64,QUJD") == ("image/png", "QUJD")
    assert split_image_data("QUJD") == ("image/png", "QUJD")


def test_polls_until_done_then_fetches_once() -> None:
    pending = {"name": "operations/op-1", "done": False}
    client = _FakeVideoClient([pending, pending, DONE_WITH_VIDEO])
    sleeps: list[float] = []
    service = _service(client, sleeps=sleeps)

    media = asyncio.run(service.generate_video("grow", "data:image/png;base64,QUJD", "9:16"))

    assert client.status_checks == ["operations/op-1"] * 3
    assert sleeps == [5.0, 5.0, 5.0]
    assert client.downloads == ["https://files/v1?alt=media"]
    assert media is not None
    assert media.mime_type == "video/mp4"
    assert media.uri.startswith("media://videos/")
    assert service.media_cache.get(media.media_id)[1] == b"\x00\x01mp4"

    model, instance, parameters = client.submissions[0]
    assert model == "video-model"
    assert instance["image"] == {"bytesBase64Encoded": "QUJD", "mimeType": "image/png"}
    assert parameters == {"sampleCount": 1, "resolution": "720p", "aspectRatio": "9:16"}


def test_done_without_uri_returns_none_and_skips_fetch() -> None:
    client = _FakeVideoClient([{"name": "operations/op-1", "done": True, "response": {}}])
    media = asyncio.run(_service(client).generate_video("grow", "QUJD"))
    assert media is None
    assert client.downloads == []


def test_job_error_payload_raises() -> None:
    client = _FakeVideoClient([{"name": "operations/op-1", "done": True, "error": {"message": "billing required"}}])
    with pytest.raises(ProviderError, match="billing required"):
        asyncio.run(_service(client).generate_video("grow", "QUJD"))


def test_status_check_failure_propagates() -> None:
    class _FailingClient(_FakeVideoClient):
        def get_operation(self, name):
            raise ProviderError("gemini", "AUTH", "forbidden", 403)

    with pytest.raises(ProviderError) as exc:
        asyncio.run(_service(_FailingClient([])).generate_video("grow", "QUJD"))
    assert exc.value.code == "AUTH"


def test_download_failure_propagates() -> None:
    client = _FakeVideoClient([DONE_WITH_VIDEO], download_error=ProviderError("gemini", "NETWORK", "down"))
    with pytest.raises(ProviderError):
        asyncio.run(_service(client).generate_video("grow", "QUJD"))


def test_poll_cap_raises_timeout() -> None:
    pending = {"name": "operations/op-1", "done": False}
    client = _FakeVideoClient([pending] * 10)
    with pytest.raises(ProviderError) as exc:
        asyncio.run(_service(client, max_poll_attempts=3).generate_video("grow", "QUJD"))
    assert exc.value.code == "TIMEOUT"
    assert len(client.status_checks) == 3


@pytest.mark.parametrize(
    "prompt,image,ratio",
    [("", "QUJD", "16:9"), ("grow", "", "16:9"), ("grow", "QUJD", "4:3"), ("grow", "data:image/png;base64,", "16:9")],
)
def test_rejects_invalid_requests_before_submission(prompt: str, image: str, ratio: str) -> None:
    client = _FakeVideoClient([])
    with pytest.raises(ValueError):
        asyncio.run(_service(client).generate_video(prompt, image, ratio))
    assert client.submissions == []


def test_started_job_reports_done_with_media() -> None:
    client = _FakeVideoClient([DONE_WITH_VIDEO])
    service = _service(client)

    async def scenario():
        handle = service.start("grow", "QUJD")
        assert service.get_job(handle.job_id) is handle
        assert handle.status is VideoJobStatus.PENDING
        media = await handle.result()
        return handle, media

    handle, media = asyncio.run(scenario())
    assert handle.status is VideoJobStatus.DONE
    assert handle.media == media
    assert handle.poll_attempts == 1
    assert handle.operation_name == "operations/op-1"


def test_started_job_can_be_cancelled() -> None:

    class _NeverDone(_FakeVideoClient):
        def get_operation(self, name):
            self.status_checks.append(name)
            return {"name": name, "done": False}

    client = _NeverDone([])

    async def slow_sleep(seconds: float) -> None:
        await asyncio.sleep(0.01)

    service = GoalVideoService(
        lambda: client, "video-model", MediaCache(), max_poll_attempts=0, sleep=slow_sleep
    )

    async def scenario():
        handle = service.start("grow", "QUJD")
        await asyncio.sleep(0.05)
        assert service.cancel(handle.job_id) is True
        with pytest.raises(asyncio.CancelledError):
            await handle.result()
        return handle

    handle = asyncio.run(scenario())
    assert handle.status is VideoJobStatus.CANCELLED
    assert handle.media is None
    assert client.downloads == []
    assert service.cancel(handle.job_id) is False


def test_started_job_failure_is_reported() -> None:
    client = _FakeVideoClient([{"name": "operations/op-1", "done": True, "error": {"message": "quota"}}])
    service = _service(client)

    async def scenario():
        handle = service.start("grow", "QUJD")
        with pytest.raises(ProviderError):
            await handle.result()
        return handle

    handle = asyncio.run(scenario())
    assert handle.status is VideoJobStatus.FAILED
    assert "quota" in str(handle.error)


def _finished_service(client, job_ttl_seconds: float, clock) -> GoalVideoService:
    async def fake_sleep(seconds: float) -> None:
        return None

    return GoalVideoService(
        lambda: client, "video-model", MediaCache(), sleep=fake_sleep, job_ttl_seconds=job_ttl_seconds, clock=clock
    )


def test_finished_jobs_are_evicted_after_retention() -> None:
    now = [100.0]
    client = _FakeVideoClient([{"name": "operations/op-1", "done": True, "response": {}}] * 50)
    service = _finished_service(client, job_ttl_seconds=60, clock=lambda: now[0])

    async def scenario() -> list[str]:
        job_ids = []
        for _ in range(50):
            handle = service.start("grow", "QUJD")
            await handle.result()
            job_ids.append(handle.job_id)
        await asyncio.sleep(0)
        return job_ids

    job_ids = asyncio.run(scenario())
    assert service.job_count() == 50
    assert service.get_job(job_ids[0]).status is VideoJobStatus.DONE

    now[0] += 61
    assert service.get_job(job_ids[0]) is None
    assert service.job_count() == 0


def test_running_jobs_are_never_evicted() -> None:
    class _NeverDone(_FakeVideoClient):
        def get_operation(self, name):
            return {"name": name, "done": False}

    async def slow_sleep(seconds: float) -> None:
        await asyncio.sleep(0.01)

    service = GoalVideoService(
        lambda: _NeverDone([]), "video-model", MediaCache(), max_poll_attempts=0, sleep=slow_sleep, job_ttl_seconds=0
    )

    async def scenario() -> None:
        handle = service.start("grow", "QUJD")
        await asyncio.sleep(0.03)
        assert service.get_job(handle.job_id) is handle
        handle.cancel()
        with pytest.raises(asyncio.CancelledError):
            await handle.result()
        await asyncio.sleep(0)
        assert service.get_job(handle.job_id) is None

    asyncio.run(scenario())
