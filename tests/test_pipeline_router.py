from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from replica.routers.pipeline import router as pipeline_router
from replica.schemas.detection import RawFrameAnalysis
from replica.services.pipeline import PipelineService


@pytest.fixture
def mock_vision(video_payload) -> MagicMock:
    vision = MagicMock()
    vision.analyze_frames = AsyncMock(
        return_value=[RawFrameAnalysis.model_validate(f) for f in video_payload["frames"]]
    )
    return vision


@pytest.fixture
def client(collaborators, mock_settings, mock_vision) -> TestClient:
    app = FastAPI()
    app.state.pipeline = PipelineService(vision=mock_vision, settings=mock_settings, **collaborators)
    app.state.chat_client = MagicMock()
    app.state.chat_client.is_reachable = AsyncMock(return_value=True)
    app.include_router(pipeline_router)
    return TestClient(app)


@pytest.fixture
def video_payload() -> dict:
    box = {"x": 10, "y": 80, "width": 30, "height": 8}
    return {
        "fps": 2.0,
        "frames": [
            {
                "frame_index": i,
                "timestamp": i * 500,
                "detections": [{"text": "SUBSCRIBE NOW", "bounding_box": box, "confidence": 0.9}],
            }
            for i in range(3)
        ],
    }


class TestHealth:
    def test_health(self, client):
        response = client.get("/api/v1/health")
        assert response.status_code == 200
        assert response.json() == {"llm_reachable": True}


class TestConsolidateEndpoint:
    def test_consolidate(self, client, video_payload):
        response = client.post("/api/v1/pipeline/consolidate", json=video_payload)

        assert response.status_code == 200
        data = response.json()
        assert len(data) == 1
        assert data[0]["text"] == "SUBSCRIBE NOW"
        assert data[0]["motion_path"]["type"] == "STATIC"
        assert data[0]["duration"] == 1.0

    def test_rejects_empty_frames(self, client):
        response = client.post("/api/v1/pipeline/consolidate", json={"frames": [], "fps": 2})
        assert response.status_code == 422

    def test_rejects_non_positive_fps(self, client, video_payload):
        response = client.post("/api/v1/pipeline/consolidate", json={**video_payload, "fps": 0})
        assert response.status_code == 422


class TestAnalyzeEndpoint:
    def test_analyze(self, client, collaborators, video_payload):
        collaborators["roles"].classify_roles = AsyncMock(
            side_effect=lambda instances: {i.id: "CTA" for i in instances}
        )
        collaborators["variations"].generate_variations = AsyncMock(
            side_effect=lambda overlays: {o.id: ["Subscribe today"] for o in overlays}
        )

        response = client.post("/api/v1/pipeline/analyze", json=video_payload)

        assert response.status_code == 200
        data = response.json()
        assert data["overlays"][0]["role"] == "CTA"
        assert data["variations"][0]["variations"] == ["Subscribe today"]
        assert data["design_system"]["fonts"]["primary"] == "Inter"
        assert data["project_id"]


class TestProcessEndpoint:
    def test_process(self, client, mock_vision):
        frames = [{"timestamp": i * 500, "base64": "aGVsbG8="} for i in range(3)]
        response = client.post("/api/v1/pipeline/process", json={"frames": frames, "fps": 2})

        assert response.status_code == 200
        assert len(response.json()["overlays"]) == 1
        mock_vision.analyze_frames.assert_awaited_once()


class TestOverlaysEndpoint:
    def test_round_trip_from_analyze(self, client, video_payload):
        result = client.post("/api/v1/pipeline/analyze", json=video_payload).json()

        response = client.post("/api/v1/pipeline/overlays", json=result)

        assert response.status_code == 200
        [overlay] = response.json()
        assert overlay["text"] == "SUBSCRIBE NOW"
        assert overlay["style"]["position"] == {"x": 25.0, "y": 84.0}


class TestMotionEndpoint:
    def test_only_moving_text_is_returned(self, client, video_payload):
        for i, frame in enumerate(video_payload["frames"]):
            frame["detections"].append(
                {
                    "text": "Swipe up",
                    "bounding_box": {"x": 10 + 20 * i, "y": 40, "width": 20, "height": 6},
                    "confidence": 0.8,
                }
            )

        response = client.post("/api/v1/pipeline/motion", json=video_payload)

        assert response.status_code == 200
        data = response.json()
        assert list(data) == ["swipe up"]
        assert data["swipe up"]["easing"] == "linear"
        assert data["swipe up"]["duration"] == 1000
