"""CLI for recording clips and extracting feature tensors."""

import argparse
import logging
import sys
from pathlib import Path

import numpy as np

from wildlife_audio.audio import AudioCollector, SpectralFeatureExtractor, decode_audio
from wildlife_audio.audio.config import AudioConfig
from wildlife_audio.audio.preprocess import normalize_length, resample
from wildlife_audio.errors import AudioPipelineError


def _cmd_list_devices(_args: argparse.Namespace) -> int:
    try:
        import sounddevice as sd
    except (ImportError, OSError):
        print("sounddevice not installed: pip install sounddevice", file=sys.stderr)
        return 1
    print(sd.query_devices())
    return 0


def _cmd_record(args: argparse.Namespace) -> int:
    config = AudioConfig()
    collector = AudioCollector(config)
    print(f"Recording {args.duration}s to {args.output} (mono {config.sample_rate} Hz)...")
    collector.record_to_file(args.output, args.duration, args.device)
    print(f"Saved: {args.output}")
    return 0


def _cmd_features(args: argparse.Namespace) -> int:
    config = AudioConfig(
        n_bands=args.bands,
        target_time_steps=args.steps,
        fft_size=args.fft_size,
        hop_length=args.hop_length,
    )
    signal = decode_audio(args.input)
    print(
        f"Decoded {signal.length} samples x {signal.num_channels} channel(s) @ {signal.sample_rate} Hz"
    )
    rng = np.random.default_rng(args.seed)
    clip = normalize_length(resample(signal, config.sample_rate), config.target_duration_sec, rng=rng)
    tensor = SpectralFeatureExtractor(config).extract(clip)
    print(
        f"Feature tensor {tensor.n_bands} bands x {tensor.time_steps} steps, "
        f"range [{tensor.values.min():.3f}, {tensor.values.max():.3f}]"
    )
    if args.output is not None:
        np.save(args.output, tensor.values)
        print(f"Saved: {args.output}")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Wildlife audio capture and feature extraction")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    rec = sub.add_parser("record", help="Record a clip to WAV (mono 16 kHz)")
    rec.add_argument(
        "--duration",
        type=float,
        default=3.0,
        help="Recording duration in seconds (default: 3)",
    )
    rec.add_argument(
        "--output",
        "-o",
        type=Path,
        default=Path("recording.wav"),
        help="Output WAV file path",
    )
    rec.add_argument(
        "--device",
        type=int,
        default=None,
        help="Input device index (list with list-devices)",
    )
    rec.set_defaults(func=_cmd_record)

    feat = sub.add_parser("features", help="Compute the classifier feature tensor of an audio file")
    feat.add_argument("input", type=Path, help="Audio file (WAV, FLAC, OGG, ...)")
    feat.add_argument("--output", "-o", type=Path, default=None, help="Save tensor as .npy")
    feat.add_argument("--bands", type=int, default=128, help="Number of frequency bands")
    feat.add_argument("--steps", type=int, default=94, help="Number of time steps")
    feat.add_argument("--fft-size", type=int, default=2048)
    feat.add_argument("--hop-length", type=int, default=512)
    feat.add_argument("--seed", type=int, default=None, help="Seed for the crop offset of long clips")
    feat.set_defaults(func=_cmd_features)

    devices = sub.add_parser("list-devices", help="List audio input devices")
    devices.set_defaults(func=_cmd_list_devices)

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        code = args.func(args)
    except AudioPipelineError as exc:
        print(f"error: {exc}", file=sys.stderr)
        code = 1
    sys.exit(code)


if __name__ == "__main__":
    main()
