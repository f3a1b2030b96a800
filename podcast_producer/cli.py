"""CLI interface with subcommand routing and pipeline orchestration."""

import argparse
import asyncio
import logging
import os
import sys

import requests

from podcast_producer import config
from podcast_producer.assembly import probe_audio_duration
from podcast_producer.constants import DEFAULT_DURATION_LABEL, DEFAULT_STYLE, VERSION
from podcast_producer.errors import MediaError, PodcastError
from podcast_producer.generator import generate_script, generate_thumbnail
from podcast_producer.library import (
    AUDIO_FILENAME,
    THUMBNAIL_FILENAME,
    VIDEO_FILENAME,
    create_podcast,
    delete_podcast,
    get_podcast_status,
    list_podcasts,
    load_podcast,
    update_podcast,
    write_media,
)
from podcast_producer.media import load_source
from podcast_producer.models import Podcast
from podcast_producer.tts import create_engine, synthesize_script
from podcast_producer.video import generate_static_video
from podcast_producer.voices import VOICE_POOLS, VOICE_MAPS, load_voice_map

logger = logging.getLogger(__name__)


def _fail(message: str) -> None:
    print(f"Error: {message}", file=sys.stderr)
    raise SystemExit(1)


def _make_engine(name: str):
    api_key = config.require_openai_key() if name == "openai" else None
    return create_engine(name, api_key=api_key)


def _print_chunk_progress(done: int, total: int) -> None:
    print(f"  Synthesized chunk {done}/{total}")


def _fetch_thumbnail(podcast: Podcast) -> str | None:
    """Generate cover art and store a local copy.

    Non-fatal: returns None when generation fails so the episode can still be
    saved. A failed download keeps the remote URL.
    """
    try:
        url = generate_thumbnail(podcast.topic, podcast.title, api_key=config.require_openai_key())
    except PodcastError as e:
        logger.warning("Thumbnail generation failed: %s", e)
        print(f"Warning: thumbnail generation failed: {e}", file=sys.stderr)
        return None

    try:
        data = load_source(url)
    except (requests.RequestException, OSError, ValueError) as e:
        logger.warning("Could not download thumbnail, keeping remote URL: %s", e)
        return url
    return write_media(podcast.slug, THUMBNAIL_FILENAME, data, output_base=config.OUTPUT_DIR)


def cmd_new(args):
    """Generate a script for a topic and store a new podcast."""
    print(f"Generating {args.duration} script about: {args.topic}")
    generated = generate_script(
        args.topic,
        duration=args.duration,
        style=args.style,
        api_key=config.require_openai_key(),
    )

    podcast = create_podcast(
        Podcast(
            title=generated.title,
            description=generated.description,
            topic=args.topic,
            duration=args.duration,
            script=generated.script,
        ),
        output_base=config.OUTPUT_DIR,
    )

    if not args.no_thumbnail:
        print("Generating thumbnail...")
        thumbnail_url = _fetch_thumbnail(podcast)
        if thumbnail_url:
            podcast = update_podcast(podcast.slug, output_base=config.OUTPUT_DIR, thumbnail_url=thumbnail_url)

    print(f"Created podcast: {podcast.slug}")
    print(f"Run 'podcast-producer audio {podcast.slug}' to generate narration.")


def cmd_thumbnail(args):
    """Generate (or regenerate) cover art for a podcast."""
    podcast = load_podcast(args.slug, output_base=config.OUTPUT_DIR)
    print("Generating thumbnail...")
    thumbnail_url = _fetch_thumbnail(podcast)
    if not thumbnail_url:
        raise SystemExit(1)
    update_podcast(podcast.slug, output_base=config.OUTPUT_DIR, thumbnail_url=thumbnail_url)
    print(f"Thumbnail ready: {thumbnail_url}")


def cmd_audio(args):
    """Synthesize the podcast script to a single MP3."""
    podcast = load_podcast(args.slug, output_base=config.OUTPUT_DIR)
    engine = _make_engine(args.engine)
    voice_map = load_voice_map(args.voices, engine.name)

    print(f"Generating audio with {engine.name} voices...")
    combined = asyncio.run(
        synthesize_script(podcast.script, engine, voice_map=voice_map, on_progress=_print_chunk_progress)
    )

    audio_url = write_media(podcast.slug, AUDIO_FILENAME, combined.data, output_base=config.OUTPUT_DIR)
    update_podcast(podcast.slug, output_base=config.OUTPUT_DIR, audio_url=audio_url)
    print(f"Done: {audio_url} ({len(combined.data)} bytes)")


def cmd_speak(args):
    """Synthesize a script file straight to an MP3 file."""
    if not os.path.exists(args.file):
        _fail(f"File not found: {args.file}")
    with open(args.file) as f:
        text = f.read()

    engine = _make_engine(args.engine)
    voice_map = load_voice_map(args.voices, engine.name)
    combined = asyncio.run(
        synthesize_script(text, engine, voice_map=voice_map, on_progress=_print_chunk_progress)
    )
    with open(args.output, "wb") as f:
        f.write(combined.data)
    print(f"Done: {args.output}")


def _print_video_progress(percent: float) -> None:
    print(f"\r  Rendering video: {percent:5.1f}%", end="", flush=True)
    if percent >= 100:
        print()


def cmd_video(args):
    """Assemble a static video from the podcast's thumbnail and audio."""
    podcast = load_podcast(args.slug, output_base=config.OUTPUT_DIR)
    if not podcast.thumbnail_url or not podcast.audio_url:
        _fail("Both thumbnail and audio are needed to generate video")

    print("Creating static video from thumbnail and audio...")
    blob = asyncio.run(
        generate_static_video(podcast.thumbnail_url, podcast.audio_url, on_progress=_print_video_progress)
    )
    video_url = write_media(podcast.slug, VIDEO_FILENAME, blob.data, output_base=config.OUTPUT_DIR)
    update_podcast(podcast.slug, output_base=config.OUTPUT_DIR, video_url=video_url)
    print(f"Done: {video_url}")


def cmd_status(args):
    """Show podcast status."""
    podcast = load_podcast(args.slug, output_base=config.OUTPUT_DIR)
    status = get_podcast_status(podcast)

    print(f"Podcast: {podcast.slug}")
    print(f"Title:   {podcast.title}")
    print(f"Length:  {podcast.duration}")
    if podcast.description:
        print(f"About:   {podcast.description}")

    audio_path = os.path.join(config.OUTPUT_DIR, podcast.slug, AUDIO_FILENAME)
    if os.path.exists(audio_path):
        try:
            seconds = probe_audio_duration(audio_path)
            print(f"Audio:   {seconds:.1f}s")
        except MediaError as e:
            logger.warning("Could not probe %s: %s", audio_path, e)

    print("Steps:")
    for step in ("script", "thumbnail", "audio", "video"):
        marker = "[done]" if status[step]["state"] == "done" else "[----]"
        print(f"  {marker} {step}")


def cmd_list(args):
    """List all podcasts."""
    podcasts = list_podcasts(output_base=config.OUTPUT_DIR)
    if not podcasts:
        print("No podcasts found.")
        return
    print("Podcasts:")
    for podcast in podcasts:
        marker = "[done]" if podcast.video_url else "[----]"
        print(f"  {marker} {podcast.slug:<30} {podcast.title}")


def cmd_delete(args):
    """Delete a podcast and its media."""
    delete_podcast(args.slug, output_base=config.OUTPUT_DIR)
    print(f"Podcast deleted: {args.slug}")


def cmd_voices(args):
    """List cast defaults and available voices for an engine."""
    print(f"Default cast ({args.engine}):")
    for role, voice in VOICE_MAPS[args.engine].items():
        print(f"  {role:<15} → {voice}")
    print("Available voices:")
    for voice in VOICE_POOLS[args.engine]:
        print(f"  {voice}")


def main(argv=None):
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="podcast-producer",
        description="Podcast Producer: AI-written two-voice podcast episodes with audio and video",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log pipeline progress")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")
    engines = sorted(VOICE_MAPS)

    # new
    new_parser = subparsers.add_parser("new", help="Generate a script and create a podcast")
    new_parser.add_argument("topic", help="What the episode is about")
    new_parser.add_argument("--duration", default=DEFAULT_DURATION_LABEL, help="Target length, e.g. '10 minutes'")
    new_parser.add_argument("--style", default=DEFAULT_STYLE, help="Tone of the conversation")
    new_parser.add_argument("--no-thumbnail", action="store_true", help="Skip cover art generation")
    new_parser.set_defaults(func=cmd_new)

    # thumbnail
    thumb_parser = subparsers.add_parser("thumbnail", help="Generate cover art for a podcast")
    thumb_parser.add_argument("slug", help="Podcast slug")
    thumb_parser.set_defaults(func=cmd_thumbnail)

    # audio
    audio_parser = subparsers.add_parser("audio", help="Synthesize the podcast script")
    audio_parser.add_argument("slug", help="Podcast slug")
    audio_parser.add_argument("--engine", choices=engines, default=config.TTS_ENGINE, help="TTS engine")
    audio_parser.add_argument("--voices", help="JSON file mapping speaker roles to voices")
    audio_parser.set_defaults(func=cmd_audio)

    # speak
    speak_parser = subparsers.add_parser("speak", help="Synthesize a script file to MP3")
    speak_parser.add_argument("file", help="Path to a Host:/Interviewer: script")
    speak_parser.add_argument("-o", "--output", default="podcast.mp3", help="Output MP3 path")
    speak_parser.add_argument("--engine", choices=engines, default=config.TTS_ENGINE, help="TTS engine")
    speak_parser.add_argument("--voices", help="JSON file mapping speaker roles to voices")
    speak_parser.set_defaults(func=cmd_speak)

    # video
    video_parser = subparsers.add_parser("video", help="Render a static video from thumbnail and audio")
    video_parser.add_argument("slug", help="Podcast slug")
    video_parser.set_defaults(func=cmd_video)

    # status
    status_parser = subparsers.add_parser("status", help="Show podcast status")
    status_parser.add_argument("slug", help="Podcast slug")
    status_parser.set_defaults(func=cmd_status)

    # list
    list_parser = subparsers.add_parser("list", help="List all podcasts")
    list_parser.set_defaults(func=cmd_list)

    # delete
    delete_parser = subparsers.add_parser("delete", help="Delete a podcast")
    delete_parser.add_argument("slug", help="Podcast slug")
    delete_parser.set_defaults(func=cmd_delete)

    # voices
    voices_parser = subparsers.add_parser("voices", help="List voices for a TTS engine")
    voices_parser.add_argument("--engine", choices=engines, default=config.TTS_ENGINE, help="TTS engine")
    voices_parser.set_defaults(func=cmd_voices)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return

    # argparse does not check defaults against choices
    engine = getattr(args, "engine", None)
    if engine is not None and engine not in VOICE_MAPS:
        _fail(f"Unknown TTS engine '{engine}' (choose from {', '.join(engines)})")

    try:
        args.func(args)
    except PodcastError as e:
        _fail(str(e))
