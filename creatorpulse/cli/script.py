"""
Script Generation CLI Commands

Commands for drafting video scripts and their production assets
(voiceover direction, image prompts, single scene rewrites).

Generated data is printed to stdout as JSON so it can be piped or saved;
status messages go to stderr.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import click
from pydantic import BaseModel, ValidationError

from ..core.errors import ConfigurationError, SceneNotFoundError, SceneRegenerationError
from ..core.models import GenerationResult, VideoScript
from ..services.script_service import ScriptGenerationService


logger = logging.getLogger(__name__)


def _load_script(path: Path) -> VideoScript:
    """Read a VideoScript JSON file written by `script generate`."""
    try:
        return VideoScript.model_validate_json(path.read_text())
    except ValidationError as e:
        click.echo(f"❌ Invalid script file {path}: {e}", err=True)
        raise click.Abort()


def _emit(model: BaseModel, output: Optional[str]) -> None:
    """Print model JSON to stdout, or write it to output."""
    payload = json.dumps(model.model_dump(mode="json", by_alias=True), indent=2)
    if output:
        Path(output).write_text(payload)
        click.echo(f"📄 Saved to: {output}", err=True)
    else:
        click.echo(payload)


def _report_source(result: GenerationResult) -> None:
    if result.is_fallback:
        click.echo("⚠️  Model call failed, showing fallback output", err=True)
        click.echo(f"   Reason: {result.fallback_reason}", err=True)


def _run(coro):
    """Run a service coroutine, turning missing configuration into a clean exit."""
    try:
        return asyncio.run(coro)
    except ConfigurationError as e:
        click.echo(f"❌ {e}", err=True)
        raise click.Abort()


@click.group(name="script")
def script_group():
    """Generate video scripts and production assets"""
    pass


@script_group.command(name="generate")
@click.option('--prompt', '-p', required=True, help='What the video is about')
@click.option('--duration', '-d', default=30, type=click.IntRange(min=1), help='Total duration in seconds')
@click.option('--style', 'visual_style', default='cinematic', help='Visual style (e.g. cinematic, anime)')
@click.option('--tone', default='inspiring', help='Narrative tone')
@click.option('--voice-gender', default='Female', help='Narrator voice gender')
@click.option('--language', default='English', help='Narration language')
@click.option('--accent', default='American', help='Narrator accent')
@click.option('--output', '-o', type=click.Path(), help='Write the script JSON to a file')
def generate_script(
    prompt: str,
    duration: int,
    visual_style: str,
    tone: str,
    voice_gender: str,
    language: str,
    accent: str,
    output: Optional[str]
):
    """
    Generate a complete video script.

    Examples:
        creatorpulse script generate -p "Why octopuses are smart" -d 30
        creatorpulse script generate -p "Morning routine" --style anime -o script.json
    """
    click.echo(f"🎬 Generating {duration}s {visual_style} script...", err=True)

    service = ScriptGenerationService()
    result = _run(service.generate_video_script(
        prompt=prompt,
        duration=duration,
        visual_style=visual_style,
        tone=tone,
        voice_gender=voice_gender,
        language=language,
        accent=accent
    ))

    _report_source(result)
    click.echo(f"✅ {result.data.title} ({len(result.data.scenes)} scenes)", err=True)
    _emit(result.data, output)


@script_group.command(name="regenerate")
@click.option('--script', 'script_file', required=True, type=click.Path(exists=True, path_type=Path), help='Script JSON file')
@click.option('--scene-id', required=True, help='Id of the scene to rewrite')
@click.option('--prompt', '-p', required=True, help='Prompt the script was generated from')
@click.option('--style', 'visual_style', default='cinematic', help='Visual style')
@click.option('--tone', default='inspiring', help='Narrative tone')
@click.option('--output', '-o', type=click.Path(), help='Write the updated script JSON to a file')
def regenerate_scene(
    script_file: Path,
    scene_id: str,
    prompt: str,
    visual_style: str,
    tone: str,
    output: Optional[str]
):
    """
    Rewrite one scene of a script, keeping its id and duration.

    Prints the full script with the new scene swapped in.

    Examples:
        creatorpulse script regenerate --script script.json --scene-id scene_2 -p "Why octopuses are smart"
    """
    script = _load_script(script_file)
    service = ScriptGenerationService()

    try:
        scene = _run(service.regenerate_scene(
            original_prompt=prompt,
            scene_id=scene_id,
            visual_style=visual_style,
            tone=tone,
            current_script=script
        ))
    except SceneNotFoundError as e:
        click.echo(f"❌ {e}", err=True)
        click.echo(f"💡 Available scenes: {', '.join(s.id for s in script.scenes)}", err=True)
        raise click.Abort()
    except SceneRegenerationError as e:
        click.echo(f"❌ {e}", err=True)
        raise click.Abort()

    click.echo(f"✅ Regenerated {scene.id}", err=True)
    _emit(ScriptGenerationService.replace_scene(script, scene), output)


@script_group.command(name="voiceover")
@click.option('--script', 'script_file', required=True, type=click.Path(exists=True, path_type=Path), help='Script JSON file')
@click.option('--output', '-o', type=click.Path(), help='Write the voiceover JSON to a file')
def voiceover(script_file: Path, output: Optional[str]):
    """
    Optimize a script's narration for text-to-speech.

    Examples:
        creatorpulse script voiceover --script script.json
    """
    script = _load_script(script_file)
    service = ScriptGenerationService()

    click.echo(f"🎙️  Optimizing narration for {len(script.scenes)} scenes...", err=True)
    result = _run(service.generate_voiceover_text(
        scenes=script.scenes,
        voice_profile=script.voice_profile,
        total_duration=script.total_duration
    ))

    _report_source(result)
    _emit(result.data, output)


@script_group.command(name="image-prompts")
@click.option('--script', 'script_file', required=True, type=click.Path(exists=True, path_type=Path), help='Script JSON file')
@click.option('--style', 'visual_style', default='cinematic', help='Visual style')
@click.option('--theme', default=None, help='Overall theme (defaults to the script title)')
@click.option('--output', '-o', type=click.Path(), help='Write the prompts JSON to a file')
def image_prompts(script_file: Path, visual_style: str, theme: Optional[str], output: Optional[str]):
    """
    Generate image prompts for every scene of a script.

    Examples:
        creatorpulse script image-prompts --script script.json --style anime
    """
    script = _load_script(script_file)
    service = ScriptGenerationService()

    click.echo(f"🖼️  Building image prompts for {len(script.scenes)} scenes...", err=True)
    result = _run(service.generate_scene_image_prompts(
        scenes=script.scenes,
        visual_style=visual_style,
        overall_theme=theme or script.title
    ))

    _report_source(result)
    _emit(result.data, output)
