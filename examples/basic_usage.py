#!/usr/bin/env python3
"""
Basic ttsdoc Usage Example

This example demonstrates the core workflow:
1. Parse Markdown into chapters, paragraphs and sentences
2. Walk the structure to build a narration script
3. Handle parse errors and validation issues
4. Stream a large document chunk by chunk
5. Save the structure as JSON
"""

import sys
from pathlib import Path

from ttsdoc import ChunkType, MarkdownParser, ParserConfig, parse_file, parse_markdown

SAMPLE = """\
---
title: A Short Tour
author: Ada Example
---

# A Short Tour

## Arrival

We arrived late in the evening. The harbour lights were already on.

## Departure

We left at dawn. Nobody saw us go.
"""


def main():
    # ─────────────────────────────────────────────────────────────────────────
    # 1. Basic parsing
    # ─────────────────────────────────────────────────────────────────────────

    result = parse_markdown(SAMPLE)
    if not result.success:
        print(f"Parse failed: {result.error}")
        return 1

    doc = result.structure
    print(f"Parsed: {doc.metadata.title} by {doc.metadata.author}")
    print(f"  Chapters: {doc.total_chapters}")
    print(f"  Sentences: {doc.total_sentences}")
    print(f"  Estimated narration: {doc.estimated_total_duration:.0f}s")
    print(f"  Confidence: {doc.confidence:.2f}")

    # ─────────────────────────────────────────────────────────────────────────
    # 2. Narration script
    # ─────────────────────────────────────────────────────────────────────────

    for chapter in doc.chapters:
        print(f"\n[{chapter.title}]")
        for paragraph in chapter.paragraphs:
            if not paragraph.include_in_audio:
                continue
            for sentence in paragraph.sentences:
                print(f"  {sentence.estimated_duration:4.1f}s  {sentence.text}")

    # ─────────────────────────────────────────────────────────────────────────
    # 3. Errors and validation
    # ─────────────────────────────────────────────────────────────────────────

    strict = MarkdownParser(ParserConfig(error_handling_strategy="strict"))
    failed = strict.parse("## Setup\n\n```bash\necho hi\n")
    if not failed.success:
        print(f"\nStrict parse failed [{failed.error.code.value}]: {failed.error}")
        for action in failed.error.suggested_actions:
            print(f"  - {action}")

    for warning in result.validation.warnings:
        print(f"Warning {warning.code}: {warning.message}")

    # ─────────────────────────────────────────────────────────────────────────
    # 4. Streaming
    # ─────────────────────────────────────────────────────────────────────────

    parser = MarkdownParser(ParserConfig.from_preset("narrative", enable_streaming=True))
    for chunk in parser.create_stream(SAMPLE):
        if chunk.type is ChunkType.CHAPTER:
            print(f"{chunk.progress:5.1f}%  {chunk.chapter.title}")

    # ─────────────────────────────────────────────────────────────────────────
    # 5. Files and JSON
    # ─────────────────────────────────────────────────────────────────────────

    if len(sys.argv) > 1:
        file_result = parse_file(sys.argv[1], ParserConfig.from_preset("technical"))
        if file_result.success:
            out = Path(sys.argv[1]).with_suffix(".structure.json")
            file_result.structure.save(out)
            print(f"Saved {out}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
