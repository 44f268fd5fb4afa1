#!/usr/bin/env python3
"""
Face Registry Demo

This demo shows how to use the enrollment and recognition flows
programmatically. A random projection stands in for the face model so the
demo runs without a camera or network weights.
"""

import os
import sys
import tempfile

import cv2
import numpy as np

from face_registry import FaceRecognizer, EmbeddingGenerator, LatestFrameBuffer
from face_registry.config import get_default_config


def create_demo_config(data_dir):
    """Create a minimal configuration for demo."""
    config = get_default_config()
    config['storage']['database_file'] = os.path.join(data_dir, 'faces.json')
    return config


def create_projection_model(input_size=(160, 160), embedding_size=128, seed=7):
    """Build a stand-in model: downsample, flatten, project to embedding_size."""
    rng = np.random.default_rng(seed)
    projection = rng.standard_normal((embedding_size, 32 * 32 * 3))

    def model(image):
        small = cv2.resize(image, (32, 32), interpolation=cv2.INTER_AREA)
        return projection @ (small.reshape(-1) - 0.5)

    return model


def draw_face(shade, eye_offset):
    """Draw a simple face-like pattern."""
    image = np.zeros((300, 300, 3), dtype=np.uint8)
    cv2.circle(image, (150, 150), 100, (shade, shade, shade), -1)                 # Face
    cv2.circle(image, (120 - eye_offset, 120), 15, (255, 255, 255), -1)          # Left eye
    cv2.circle(image, (180 + eye_offset, 120), 15, (255, 255, 255), -1)          # Right eye
    cv2.ellipse(image, (150, 180), (30, 15), 0, 0, 180, (255, 255, 255), -1)    # Mouth
    return image


def demo_face_registry():
    """Demonstrate enrollment and recognition."""
    print("Face Registry Demo")
    print("=" * 40)

    with tempfile.TemporaryDirectory() as data_dir:
        config = create_demo_config(data_dir)
        generator = EmbeddingGenerator(config, model=create_projection_model())
        recognizer = FaceRecognizer(config, embedding_generator=generator)
        print("✓ Face recognizer initialized")

        frames = LatestFrameBuffer()
        print(f"\nCapture before any frame: {recognizer.capture_frame(frames)['error']}")

        alice = draw_face(128, 0)
        bob = draw_face(60, 12)

        for name, image in (("Alice", alice), ("Bob", bob)):
            frames.put(image)
            captured = recognizer.capture_frame(frames)
            result = recognizer.enroll_face(name, captured['frame'])
            status = "✓ registered" if result['success'] else f"✗ {result['error']}"
            print(f"{name}: {status}")

        print("\nRecognizing...")
        noisy_alice = np.clip(alice.astype(np.int16) + np.random.randint(-8, 8, alice.shape), 0, 255)
        for label, image in (("Alice (noisy)", noisy_alice.astype(np.uint8)),
                             ("Bob", bob),
                             ("Blank", np.full((300, 300, 3), 200, dtype=np.uint8))):
            result = recognizer.recognize_face(image)
            distance = result['distance']
            distance_text = f"{distance:.4f}" if distance is not None else "n/a"
            print(f"- {label}: {result['person_name']} (distance {distance_text})")

        stats = recognizer.get_recognition_statistics()
        print(f"\nSystem statistics:")
        print(f"- Total identities: {stats['total_identities']}")
        print(f"- Recognitions: {stats['recognitions']}")
        print(f"- Successful recognitions: {stats['successful_recognitions']}")

    print("\n✓ Demo completed successfully!")


if __name__ == '__main__':
    sys.exit(demo_face_registry())
