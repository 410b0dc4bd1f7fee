"""
CLI Entry Point: Extract Skills

Runs a connector or the extractor directly and prints the result. Nothing
is written to the profile store.

Usage:
    python scripts/extract_skills.py text "5 years of Python and Docker"
    python scripts/extract_skills.py file ./cv.txt
    python scripts/extract_skills.py github octocat
    python scripts/extract_skills.py linkedin https://www.linkedin.com/in/john-doe
    python scripts/extract_skills.py gaps --skills Python,Docker --role "ML Engineer"
    python scripts/extract_skills.py recommend --skills Python,Docker
"""

import argparse
import asyncio
import json
import mimetypes
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.common.config import Config
from src.common.logger import setup_logging
from src.connectors.github_connector import GitHubConnector
from src.connectors.linkedin_connector import LinkedInConnector
from src.extraction.skill_extractor import SkillExtractor


def print_candidates(skills) -> None:
    if not skills:
        print("  (no skills found)")
        return
    for skill in skills:
        channel = f" [{skill.source}]" if skill.source else ""
        print(f"  • {skill.name:<24} {skill.category:<22} {skill.proficiency:<13} {skill.confidence:.2f}{channel}")


def split_skills(value: str) -> list:
    return [s.strip() for s in value.split(",") if s.strip()]


async def run(args: argparse.Namespace) -> int:
    extractor = SkillExtractor()
    mode = "mock" if extractor.is_mock_mode else extractor.model
    print(f"🔍 Extractor mode: {mode}\n")

    if args.command == "text":
        result = await extractor.extract_from_text(args.text)
        print(f"📋 {len(result.skills)} skills from text ({result.metadata.text_length} chars)")
        print_candidates(result.skills)

    elif args.command == "file":
        path = Path(args.path)
        if not path.exists():
            print(f"❌ File not found: {args.path}")
            return 1
        mime_type = mimetypes.guess_type(path.name)[0] or "text/plain"
        if not mime_type.startswith("text/"):
            print(f"❌ Only text files can be extracted locally (got {mime_type}); upload documents via the service")
            return 1
        text = path.read_text(encoding="utf-8", errors="replace")
        result = await extractor.extract_from_text(text)
        print(f"📋 {len(result.skills)} skills from {path.name}")
        print_candidates(result.skills)

    elif args.command == "github":
        extraction = await GitHubConnector(extractor).extract(args.username)
        print(f"📋 {len(extraction.skills)} skills from {extraction.repo_count} repositories")
        print(f"   Languages: {', '.join(extraction.languages) or '-'}")
        if extraction.skipped:
            print(f"   Skipped READMEs: {', '.join(item['item'] for item in extraction.skipped)}")
        print_candidates(extraction.skills)

    elif args.command == "linkedin":
        connector = LinkedInConnector(extractor)
        if not connector.validate_url(args.url):
            print(f"❌ Invalid LinkedIn profile URL: {args.url}")
            return 1
        extraction = await connector.extract(args.url)
        print(f"📋 {len(extraction.skills)} skills from {extraction.metadata.get('name')}")
        print_candidates(extraction.skills)

    elif args.command == "gaps":
        analysis = await extractor.analyze_skill_gaps(split_skills(args.skills), args.role)
        print(json.dumps(analysis, indent=2))

    elif args.command == "recommend":
        recommendations = await extractor.recommend_skills(split_skills(args.skills), args.role)
        print(json.dumps(recommendations, indent=2))

    return 0


def main():
    """Main CLI function."""
    parser = argparse.ArgumentParser(description="Extract skills from a source and print them")
    parser.add_argument("--debug", action="store_true", help="Enable verbose logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    text_parser = subparsers.add_parser("text", help="Extract skills from free text")
    text_parser.add_argument("text", help="Text to analyze")

    file_parser = subparsers.add_parser("file", help="Extract skills from a local text file")
    file_parser.add_argument("path", help="Path to a .txt/.md CV")

    github_parser = subparsers.add_parser("github", help="Extract skills from a GitHub account")
    github_parser.add_argument("username", help="GitHub username")

    linkedin_parser = subparsers.add_parser("linkedin", help="Extract skills from a LinkedIn profile")
    linkedin_parser.add_argument("url", help="LinkedIn profile URL")

    gaps_parser = subparsers.add_parser("gaps", help="Analyze skill gaps for a target role")
    gaps_parser.add_argument("--skills", required=True, help="Comma-separated current skills")
    gaps_parser.add_argument("--role", required=True, help="Target role")

    recommend_parser = subparsers.add_parser("recommend", help="Recommend skills to learn next")
    recommend_parser.add_argument("--skills", required=True, help="Comma-separated current skills")
    recommend_parser.add_argument("--role", default=None, help="Optional target role")

    args = parser.parse_args()

    setup_logging("DEBUG" if args.debug else Config.LOG_LEVEL, Config.LOG_FORMAT)

    try:
        sys.exit(asyncio.run(run(args)))
    except KeyboardInterrupt:
        print("\n⚠️  Interrupted")
        sys.exit(130)
    except Exception as e:
        print(f"\n❌ Extraction failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
