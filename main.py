#!/usr/bin/env python3
"""
Lao Instrument Classifier - command-line entry point.

Usage:
    lao-classifier features path/to/recording.wav
    lao-classifier features path/to/recording.wav --preset single_shot_v1 --segments
    lao-classifier decide --labels khaen,pin,sing --output 0.92,0.05,0.03
    lao-classifier decide --output 0.4,0.35,0.25 --confidence 0.9 --entropy 0.12

The model itself is external; `decide` takes its output vector as input.
"""

import argparse
import json
import sys
from typing import List, Optional

import numpy as np

from instrument_classifier.audio import AudioLoader
from instrument_classifier.classification import (
    DecisionThresholds,
    ResultAggregator,
    decide,
    default_labels,
)
from instrument_classifier.core import (
    ClassifierError,
    SegmentConfig,
    SegmentedFeatureExtractor,
    SpectrogramConfig,
    SpectrogramEngine,
    get_preset,
)
from instrument_classifier.utils import Config, setup_logger

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


def _parse_floats(text: str) -> List[float]:
    return [float(v) for v in text.split(',') if v.strip()]


def cmd_features(args, config: Config) -> int:
    """Extract features from an audio file and print a summary."""
    engine_config = get_preset(args.preset) if args.preset else SpectrogramConfig.from_config(config)
    engine = SpectrogramEngine(engine_config)

    buffer = AudioLoader(sample_rate=engine_config.sample_rate).load(args.path)

    if args.segments:
        extractor = SegmentedFeatureExtractor(engine, SegmentConfig.from_config(config))
        tensor = extractor.extract_tensor(buffer)
        real = extractor.count_segments(len(buffer))
        summary = {
            "file": args.path,
            "duration_sec": round(buffer.duration_sec, 3),
            "mode": "segmented",
            "shape": [1, *tensor.shape],
            "real_segments": real,
            "min": float(tensor.min()),
            "max": float(tensor.max()),
        }
    else:
        tensor = engine.extract(buffer)
        model_input = engine.prepare_model_input(tensor)
        summary = {
            "file": args.path,
            "duration_sec": round(buffer.duration_sec, 3),
            "mode": "single_shot",
            "layout": str(tensor.layout),
            "frames": tensor.num_frames,
            "mels": tensor.num_mels,
            "shape": list(model_input.shape),
            "min": float(np.min(tensor.data)),
            "max": float(np.max(tensor.data)),
        }

    print(json.dumps(summary, indent=2))
    return 0


def cmd_decide(args, config: Config) -> int:
    """Apply the decision rule to a model output vector."""
    if args.labels:
        labels = [label.strip() for label in args.labels.split(',') if label.strip()]
    else:
        labels = config.get('classification.labels') or default_labels()

    thresholds = DecisionThresholds.from_config(config)
    confidence = args.confidence if args.confidence is not None else thresholds.confidence
    entropy = args.entropy if args.entropy is not None else thresholds.entropy

    result = decide(_parse_floats(args.output), labels, confidence, entropy)
    print(json.dumps(ResultAggregator.to_dict(result), indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='lao-classifier',
        description='Mel-spectrogram features and classification decisions for Lao instruments',
    )
    parser.add_argument('--config', help='Path to YAML config (default: config/default_config.yaml)')
    parser.add_argument('--log-level', default=None, type=str.upper, choices=LOG_LEVELS,
                        help='Logging level (default: logging.level from config)')

    sub = parser.add_subparsers(dest='command', required=True)

    features = sub.add_parser('features', help='Extract features from an audio file')
    features.add_argument('path', help='Audio file (wav, flac, ogg, mp3, m4a)')
    features.add_argument('--preset', help='Feature preset name (overrides config)')
    features.add_argument('--segments', action='store_true', help='Multi-segment features')
    features.set_defaults(func=cmd_features)

    decide_cmd = sub.add_parser('decide', help='Decide from a model output vector')
    decide_cmd.add_argument('--output', required=True, help='Comma-separated model outputs')
    decide_cmd.add_argument('--labels', help='Comma-separated labels (default: config or catalog)')
    decide_cmd.add_argument('--confidence', type=float, help='Confidence threshold')
    decide_cmd.add_argument('--entropy', type=float, help='Entropy threshold')
    decide_cmd.set_defaults(func=cmd_decide)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    config = Config(args.config)

    try:
        setup_logger(
            name='instrument_classifier',
            level=args.log_level or config.get('logging.level', 'INFO'),
            log_file=config.get('logging.log_file'),
            json_format=bool(config.get('logging.json_format', False)),
        )
        return args.func(args, config)
    except (ClassifierError, FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
