"""
Test cases for Embedding Generation Module
"""

import numpy as np
import pytest

from face_registry.embedding_generator import EmbeddingGenerator


class RecordingModel:
    """Stand-in model that records its input and returns a fixed vector."""

    def __init__(self, output):
        self.output = output
        self.inputs = []

    def __call__(self, image):
        self.inputs.append(image)
        return self.output


class TestEmbeddingGenerator:
    """Test cases for EmbeddingGenerator class."""

    @pytest.fixture
    def config(self):
        """Test configuration."""
        return {
            'embedding': {
                'embedding_size': 128,
                'input_size': [160, 160],
                'normalization': False
            }
        }

    @pytest.fixture
    def face_image(self):
        """A BGR face crop of arbitrary size."""
        rng = np.random.default_rng(1)
        return rng.integers(0, 256, size=(220, 180, 3), dtype=np.uint8)

    def test_generator_initialization(self, config):
        generator = EmbeddingGenerator(config)
        assert generator.embedding_size == 128
        assert generator.input_size == (160, 160)
        assert generator.model is None

    @pytest.mark.parametrize("shape", [(200, 200), (200, 200, 1), (120, 90, 3), (64, 64, 4)])
    def test_preprocess_shapes(self, config, shape):
        """Any supported crop becomes a 160x160 RGB float image in [0, 1]."""
        generator = EmbeddingGenerator(config)
        image = np.full(shape, 128, dtype=np.uint8)

        prepared = generator.preprocess_face(image)

        assert prepared.shape == (160, 160, 3)
        assert prepared.dtype == np.float32
        assert prepared.min() >= 0.0
        assert prepared.max() <= 1.0

    def test_preprocess_converts_bgr_to_rgb(self, config):
        generator = EmbeddingGenerator(config)
        blue = np.zeros((50, 50, 3), dtype=np.uint8)
        blue[:, :, 0] = 255

        prepared = generator.preprocess_face(blue)

        np.testing.assert_allclose(prepared[80, 80], [0.0, 0.0, 1.0])

    def test_preprocess_float_input(self, config):
        """Images already scaled to [0, 1] are accepted."""
        generator = EmbeddingGenerator(config)
        prepared = generator.preprocess_face(np.full((40, 40, 3), 0.5, dtype=np.float32))
        assert prepared.shape == (160, 160, 3)
        assert prepared[0, 0, 0] == pytest.approx(127 / 255.0)

    def test_preprocess_custom_size(self, config):
        config['embedding']['input_size'] = [112, 96]
        generator = EmbeddingGenerator(config)
        prepared = generator.preprocess_face(np.zeros((200, 200, 3), dtype=np.uint8))
        assert prepared.shape == (96, 112, 3)

    def test_preprocess_rejects_invalid(self, config):
        generator = EmbeddingGenerator(config)
        assert generator.preprocess_face(None) is None
        assert generator.preprocess_face(np.zeros((0, 0, 3), dtype=np.uint8)) is None
        assert generator.preprocess_face(np.zeros((10, 10, 2), dtype=np.uint8)) is None

    def test_generate_embedding(self, config, face_image):
        output = np.linspace(-1.0, 1.0, 128) + 0.01
        model = RecordingModel(output)
        generator = EmbeddingGenerator(config, model=model)

        embedding = generator.generate_embedding(face_image)

        np.testing.assert_allclose(embedding, output)
        assert model.inputs[0].shape == (160, 160, 3)

    def test_generate_embedding_accepts_nested_output(self, config, face_image):
        """Model outputs shaped (1, D) are flattened."""
        generator = EmbeddingGenerator(config, model=RecordingModel([[0.1] * 128]))
        assert generator.generate_embedding(face_image).shape == (128,)

    def test_generate_embedding_normalized(self, config, face_image):
        config['embedding']['normalization'] = True
        generator = EmbeddingGenerator(config, model=RecordingModel([3.0] * 128))
        embedding = generator.generate_embedding(face_image)
        assert np.linalg.norm(embedding) == pytest.approx(1.0)

    def test_no_model(self, config, face_image):
        assert EmbeddingGenerator(config).generate_embedding(face_image) is None

    def test_model_failure(self, config, face_image):
        """Inference errors become 'no embedding'."""
        def failing_model(image):
            raise RuntimeError("model unavailable")

        generator = EmbeddingGenerator(config, model=failing_model)
        assert generator.generate_embedding(face_image) is None

    @pytest.mark.parametrize("output", [
        [0.1] * 64,
        [0.0] * 128,
        [float('nan')] * 128,
        None,
    ])
    def test_malformed_model_output(self, config, face_image, output):
        generator = EmbeddingGenerator(config, model=RecordingModel(output))
        assert generator.generate_embedding(face_image) is None

    def test_normalize_zero_vector(self, config):
        generator = EmbeddingGenerator(config)
        zeros = np.zeros(4)
        np.testing.assert_array_equal(generator.normalize_embedding(zeros), zeros)
