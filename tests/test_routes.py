"""Tests for the Flask API: analysis, history, video blending, training samples."""

import json

import pytest

from generate_test_audio import SR, b64, silence_pcm, sine_pcm
from sound_analysis import EMOTION_LABELS


def analyze(client, pcm, **extra):
    body = {"audioData": b64(pcm), "sampleRate": SR}
    body.update(extra)
    return client.post("/api/analyze", json=body)


class TestAnalyzeRoute:
    def test_returns_result(self, client):
        response = analyze(client, sine_pcm(800), animal="dog")
        assert response.status_code == 200

        data = response.get_json()
        assert set(data) == {
            "id", "animal", "timestamp", "dominantEmotion", "emotionScores", "audioFeatures",
        }
        assert data["animal"] == "dog"
        assert set(data["emotionScores"]) == set(EMOTION_LABELS)
        assert sum(data["emotionScores"].values()) == pytest.approx(1.0)

    def test_detects_species_when_omitted(self, client):
        data = analyze(client, sine_pcm(800)).get_json()
        assert data["animal"] == "dog"

    def test_accepts_data_url(self, client):
        response = client.post("/api/analyze", json={
            "audioData": "data:audio/wav;base64," + b64(sine_pcm(800)),
            "sampleRate": SR,
        })
        assert response.status_code == 200

    def test_too_short(self, client):
        response = analyze(client, b"\x00" * 50)
        assert response.status_code == 400
        assert "too short" in response.get_json()["error"]

    def test_too_large(self, app, client):
        app.config["MAX_AUDIO_BYTES"] = 1000
        response = analyze(client, sine_pcm(800, duration=0.1))
        assert response.status_code == 400
        assert "too large" in response.get_json()["error"]

    @pytest.mark.parametrize("body", [
        {"audioData": "AAAA" * 50},                                   # no sampleRate
        {"audioData": "AAAA" * 50, "sampleRate": 0},
        {"audioData": "AAAA" * 50, "sampleRate": "fast"},
        {"audioData": "AAAA" * 50, "sampleRate": SR, "animal": "horse"},
        {"audioData": "not base64!!", "sampleRate": SR},
        {"sampleRate": SR},
    ])
    def test_invalid_bodies(self, client, body):
        response = client.post("/api/analyze", json=body)
        assert response.status_code == 400
        assert response.get_json()["success"] is False

    def test_non_json_body(self, client):
        response = client.post("/api/analyze", data="hello", content_type="text/plain")
        assert response.status_code == 400


class TestHistory:
    def test_saved_and_listed_newest_first(self, client):
        first = analyze(client, sine_pcm(800)).get_json()
        second = analyze(client, silence_pcm()).get_json()

        listed = client.get("/api/analyses").get_json()
        assert [a["id"] for a in listed] == [second["id"], first["id"]]

    def test_get_by_id(self, client):
        created = analyze(client, sine_pcm(800)).get_json()
        fetched = client.get(f"/api/analyses/{created['id']}")
        assert fetched.status_code == 200
        assert fetched.get_json() == created

    def test_unknown_id(self, client):
        response = client.get("/api/analyses/does-not-exist")
        assert response.status_code == 404


class TestAnalyzeVideo:
    KEYPOINTS = [{"x": 0, "y": 0, "score": 0.9} for _ in range(17)]

    def setup_method(self):
        points = {0: (270, 50), 5: (200, 100), 6: (340, 100), 11: (200, 200),
                  12: (340, 200), 13: (200, 250), 14: (340, 250)}
        self.keypoints = [dict(k) for k in self.KEYPOINTS]
        for index, (x, y) in points.items():
            self.keypoints[index] = {"x": x, "y": y, "score": 0.9}

    def test_without_pose_is_silent_baseline(self, client):
        response = client.post("/api/analyze-video", json={"animal": "cat"})
        assert response.status_code == 200
        data = response.get_json()
        assert data["animal"] == "cat"
        assert data["dominantEmotion"] == "contentment"

    def test_pose_is_blended(self, client):
        baseline = client.post("/api/analyze-video", json={"animal": "dog"}).get_json()
        response = client.post("/api/analyze-video", json={
            "animal": "dog",
            "poseData": json.dumps({"keypoints": self.keypoints}),
        })
        assert response.status_code == 200
        data = response.get_json()

        assert data["dominantEmotion"] == "happiness"
        assert data["emotionScores"]["happiness"] == pytest.approx(
            baseline["emotionScores"]["happiness"] * 0.4 + (2.2 / 6.8) * 0.6
        )
        assert sum(data["emotionScores"].values()) == pytest.approx(1.0)

    def test_defaults_to_dog(self, client):
        data = client.post("/api/analyze-video", json={}).get_json()
        assert data["animal"] == "dog"

    def test_bad_pose_json(self, client):
        response = client.post("/api/analyze-video", json={"poseData": "{not json"})
        assert response.status_code == 400

    @pytest.mark.parametrize("point", [
        {"x": "left", "y": None, "score": 0.9},
        {"x": 10, "score": 0.9},
        {"x": 10, "y": 20, "score": "high"},
        {"x": True, "y": 20},
        [10, 20],
    ])
    def test_malformed_keypoints_rejected(self, client, point):
        response = client.post("/api/analyze-video", json={
            "poseData": {"keypoints": [point] * 17},
        })
        assert response.status_code == 400
        assert response.get_json()["success"] is False
        assert "keypoints[0]" in response.get_json()["error"]

    def test_null_keypoints_and_missing_score_accepted(self, client):
        keypoints = [{"x": k["x"], "y": k["y"]} for k in self.keypoints]
        keypoints[3] = None
        response = client.post("/api/analyze-video", json={
            "poseData": {"keypoints": keypoints},
        })
        assert response.status_code == 200
        assert sum(response.get_json()["emotionScores"].values()) == pytest.approx(1.0)

    def test_video_results_are_saved(self, client):
        created = client.post("/api/analyze-video", json={"animal": "pigeon"}).get_json()
        assert client.get(f"/api/analyses/{created['id']}").status_code == 200


class TestTrainingSamples:
    def _create(self, client, pcm, **extra):
        body = {
            "animal": "cat",
            "emotion": "comfort",
            "audioData": b64(pcm),
            "fileName": "purr.wav",
        }
        body.update(extra)
        return client.post("/api/training-samples", json=body)

    def test_create_and_list(self, client):
        response = self._create(client, sine_pcm(600))
        assert response.status_code == 201
        sample = response.get_json()
        assert sample["animal"] == "cat"
        assert sample["emotion"] == "comfort"
        assert len(sample["audioHash"]) == 32

        listed = client.get("/api/training-samples").get_json()
        assert [s["id"] for s in listed] == [sample["id"]]

    def test_override_on_matching_audio(self, client):
        pcm = sine_pcm(600)
        self._create(client, pcm)

        data = analyze(client, pcm, animal="dog", fileName="recording.wav").get_json()
        assert data["animal"] == "cat"
        assert data["dominantEmotion"] == "comfort"
        assert data["emotionScores"]["comfort"] == 0.55
        assert data["emotionScores"]["fear"] == 0.05

    def test_override_on_matching_file_name(self, client):
        self._create(client, sine_pcm(600))
        data = analyze(client, sine_pcm(1500), fileName="purr.wav").get_json()
        assert data["dominantEmotion"] == "comfort"

    def test_no_override_for_other_audio(self, client):
        self._create(client, sine_pcm(600))
        data = analyze(client, sine_pcm(1500), fileName="bark.wav").get_json()
        assert data["emotionScores"]["comfort"] != 0.55

    @pytest.mark.parametrize("file_name", [["purr.wav"], 42, {"name": "purr.wav"}])
    def test_non_string_file_name_on_analyze(self, client, file_name):
        self._create(client, sine_pcm(600))
        response = analyze(client, sine_pcm(1500), fileName=file_name)
        assert response.status_code == 400
        assert response.get_json()["error"] == "fileName must be a string"

    def test_non_string_file_name_on_create(self, client):
        response = self._create(client, sine_pcm(600), fileName=["purr.wav"])
        assert response.status_code == 400
        assert client.get("/api/training-samples").get_json() == []

    def test_blank_file_name_on_create(self, client):
        response = self._create(client, sine_pcm(600), fileName="   ")
        assert response.status_code == 400

    def test_invalid_emotion(self, client):
        response = self._create(client, sine_pcm(600), emotion="bored")
        assert response.status_code == 400

    def test_missing_animal(self, client):
        response = self._create(client, sine_pcm(600), animal="")
        assert response.status_code == 400

    def test_delete(self, client):
        sample = self._create(client, sine_pcm(600)).get_json()

        response = client.delete(f"/api/training-samples/{sample['id']}")
        assert response.status_code == 200
        assert client.get("/api/training-samples").get_json() == []

        again = client.delete(f"/api/training-samples/{sample['id']}")
        assert again.status_code == 404
