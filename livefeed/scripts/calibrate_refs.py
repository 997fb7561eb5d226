"""
Build the histogram model artifact from reference photos.

Usage:
  python -m livefeed.scripts.calibrate_refs refs/ models/histograms.pkl [--input-size 224]

refs/ holds one sub-directory per label, each with one or more .jpg/.png
images of that class:
  refs/tabby_cat/*.jpg
  refs/coffee_mug/*.jpg
"""
import argparse
import sys
from pathlib import Path

import cv2
from livefeed.adapters.vision.histogram_vision import build_model, save_model

IMAGE_SUFFIXES = {".jpg", ".jpeg", ".png"}


def collect_samples(refs_dir: Path) -> dict:
    samples = {}
    for label_dir in sorted(p for p in refs_dir.iterdir() if p.is_dir()):
        images = []
        for path in sorted(label_dir.iterdir()):
            if path.suffix.lower() not in IMAGE_SUFFIXES:
                continue
            img = cv2.imread(str(path))
            if img is None:
                print(f"  [WARN] unreadable {path}")
                continue
            images.append(img)
        if images:
            samples[label_dir.name] = images
            print(f"  {label_dir.name}: {len(images)} image(s)")
        else:
            print(f"  [WARN] {label_dir.name}: no usable images, skipped")
    return samples


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("refs_dir", type=Path)
    parser.add_argument("output", type=Path)
    parser.add_argument("--input-size", type=int, default=224)
    args = parser.parse_args(argv)

    if not args.refs_dir.is_dir():
        print(f"[ERROR] {args.refs_dir} is not a directory")
        return 1

    samples = collect_samples(args.refs_dir)
    if not samples:
        print("[ERROR] no labels with reference images found")
        return 1

    model = build_model(samples, args.input_size)
    save_model(args.output, model)
    print(f"\nSaved {len(model['labels'])} labels → {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
