"""
Main Application Module

Command-line access to the identity store: enroll and recognize
precomputed embeddings, list enrolled people and print statistics.
"""

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional

import numpy as np

from .config import load_config
from .recognizer import FaceRecognizer

logger = logging.getLogger(__name__)


def setup_logging(config: Dict[str, Any]):
    """Configure root logging from the 'logging' config section."""
    logging_config = config.get('logging', {})
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    file_error = None
    if logging_config.get('log_file'):
        try:
            handlers.append(logging.FileHandler(logging_config['log_file']))
        except OSError as e:
            file_error = e

    logging.basicConfig(
        level=getattr(logging, str(logging_config.get('level', 'INFO')).upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
        force=True
    )

    if file_error is not None:
        logger.warning(f"Cannot open log file, logging to stdout only: {file_error}")


def load_embedding_file(path: str) -> Optional[np.ndarray]:
    """
    Read an embedding from a .npy file or a JSON list.

    Args:
        path: Embedding file path

    Returns:
        Embedding vector or None if the file cannot be read
    """
    try:
        if path.endswith('.npy'):
            data = np.load(path, allow_pickle=False)
        else:
            with open(path, 'r') as f:
                data = json.load(f)
        return np.asarray(data, dtype=np.float64).reshape(-1)
    except (OSError, ValueError, TypeError, OverflowError) as e:
        logger.error(f"Failed to read embedding from {path}: {e}")
        return None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Face Registry')
    parser.add_argument('--config', '-c', default=None,
                        help='Configuration file path')
    parser.add_argument('--database', '-d', default=None,
                        help='Identity file path (overrides config)')

    subparsers = parser.add_subparsers(dest='command', required=True)

    enroll = subparsers.add_parser('enroll', help='Enroll a person from an embedding file')
    enroll.add_argument('--name', '-n', required=True, help='Person name')
    enroll.add_argument('--embedding', '-e', required=True,
                        help='Embedding file (.npy or JSON list)')

    recognize = subparsers.add_parser('recognize', help='Identify an embedding file')
    recognize.add_argument('--embedding', '-e', required=True,
                           help='Embedding file (.npy or JSON list)')

    subparsers.add_parser('list', help='List enrolled people')
    subparsers.add_parser('stats', help='Print store statistics')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    config = load_config(args.config)
    if args.database:
        config.setdefault('storage', {})['database_file'] = args.database
    setup_logging(config)

    recognizer = FaceRecognizer(config)

    if args.command == 'enroll':
        embedding = load_embedding_file(args.embedding)
        if embedding is None:
            print("Failed to read embedding file")
            return 1
        result = recognizer.enroll_embedding(args.name, embedding)
        if not result['success']:
            print(f"Enrollment failed: {result['error']}")
            return 1
        print(f"Face registered successfully: {result['person_name']}")
        return 0

    if args.command == 'recognize':
        embedding = load_embedding_file(args.embedding)
        if embedding is None:
            print("Failed to read embedding file")
            return 1
        result = recognizer.recognize_embedding(embedding)
        if result['distance'] is None:
            print(f"Recognized: {result['person_name']}")
        else:
            print(f"Recognized: {result['person_name']} (distance {result['distance']:.4f})")
        return 0

    if args.command == 'list':
        identities = recognizer.store.load_all()
        print(f"Enrolled people: {len(identities)}")
        for index, identity in enumerate(identities, start=1):
            print(f"- {index}: {identity.name}")
        return 0

    stats = recognizer.get_recognition_statistics()
    for key in ('total_identities', 'unique_names', 'embedding_dimension',
                'database_file', 'last_load_status'):
        print(f"{key}: {stats[key]}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
