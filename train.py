"""Fit a sequence pipeline on a Hugging Face text dataset and save it."""

import argparse
import logging

import numpy as np
from datasets import load_dataset

import textseq

# Configure logging to show INFO level and above.
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%H:%M:%S",
)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("dataset", help="dataset name or local path for load_dataset()")
    parser.add_argument("--split", default="train")
    parser.add_argument("--text-field", default="text")
    parser.add_argument("--max-tokens", type=int, required=True, help="vocabulary size K")
    parser.add_argument("--sequence-length", type=int, required=True, help="sequence length L")
    parser.add_argument("--truncating", default="post", choices=["pre", "post"])
    parser.add_argument("--padding", default="post", choices=["pre", "post"])
    parser.add_argument("--min-times", type=int, default=1)
    parser.add_argument("--pattern", default="words", choices=textseq.list_patterns())
    parser.add_argument("--test-size", type=float, default=0.25)
    parser.add_argument("--seed", type=int, default=1234)
    parser.add_argument("--output", default="artifacts/pipeline", help="save prefix")
    parser.add_argument("--workers", type=int, default=None, help="encoding threads")
    parser.add_argument("--no-progress", action="store_true")
    return parser.parse_args()


def main() -> None:
    """Split the dataset, fit on the training part and report coverage on both parts."""
    args = parse_args()

    config = textseq.EncodingConfig(
        max_tokens=args.max_tokens,
        sequence_length=args.sequence_length,
        truncating=args.truncating,
        padding=args.padding,
        min_times=args.min_times,
        pattern=args.pattern,
    )

    ds = load_dataset(args.dataset, split=args.split)
    splits = ds.train_test_split(test_size=args.test_size, seed=args.seed)
    print(f"train records: {len(splits['train']):,}  test records: {len(splits['test']):,}")

    pipe = textseq.SequencePipeline(config)
    encode_opts = {"num_workers": args.workers, "show_progress": not args.no_progress}
    x_train = pipe.fit_transform(splits["train"], text_field=args.text_field, **encode_opts)
    x_test = pipe.transform(splits["test"], text_field=args.text_field, **encode_opts)

    for name, x in (("train", x_train), ("test", x_test)):
        # share of slots that hold a real token id
        filled = float(np.mean(x != textseq.PAD_ID)) if x.size else 0.0
        print(f"{name}: shape {x.shape}, {filled:.1%} non-padding ids")

    pipe.save(args.output)
    print(f"saved pipeline to {args.output}.model")


if __name__ == "__main__":
    main()
