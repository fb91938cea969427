"""
Ligne de commande de locale-sync.

Commandes :
- sync : synchronise toutes les langues depuis le fichier de base
- translate FICHIER... : extrait et traduit les nouvelles clés des fichiers
- clean [--yes] : supprime les clés qui ne sont plus utilisées

Example:
    $ python -m locale_sync --workspace ./mon-app sync
    $ python -m locale_sync translate src/App.tsx src/pages/Home.tsx
"""

import argparse
import asyncio
from pathlib import Path
from typing import Optional, Sequence

from .coalescer import SavedDocument
from .config import DEFAULT_CONFIG_FILENAME, SyncSettings, lock_config
from .context import SyncContext
from .engine import TranslationEngine
from .errors import LocaleSyncError
from .logger import get_logger
from .progress import TqdmReporter

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="locale-sync",
        description="Synchronise les fichiers de langue JSON d'un projet JS/TS via un LLM.",
    )
    parser.add_argument(
        "--workspace",
        type=Path,
        default=Path.cwd(),
        help="Racine du projet (défaut : dossier courant)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help=f"Fichier de réglages JSON (défaut : <workspace>/{DEFAULT_CONFIG_FILENAME} s'il existe)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("sync", help="Traduit les clés manquantes de toutes les langues")

    translate = subparsers.add_parser(
        "translate", help="Traduit les nouvelles clés des fichiers donnés"
    )
    translate.add_argument("files", nargs="+", type=Path)

    clean = subparsers.add_parser("clean", help="Supprime les clés inutilisées")
    clean.add_argument(
        "--yes", action="store_true", help="Supprimer sans demander confirmation"
    )
    return parser


def _confirm_interactive(keys: list[str]) -> bool:
    print(f"{len(keys)} clé(s) inutilisée(s) :")
    for key in keys:
        print(f"  - {key}")
    answer = input("Supprimer ces clés de tous les fichiers de langue ? [o/N] ")
    return answer.strip().lower() in ("o", "oui", "y", "yes")


async def run(args: argparse.Namespace, settings: SyncSettings) -> int:
    workspace = args.workspace.resolve()
    reporter = TqdmReporter()

    async with SyncContext(settings, workspace, reporter=reporter) as context:
        engine = TranslationEngine(context)
        try:
            if args.command == "sync":
                result = await engine.sync_from_baseline()
                logger.info(f"✅ Synchronisation : {result.written} traduction(s) écrite(s)")

            elif args.command == "translate":
                documents = [
                    SavedDocument.from_file(path.resolve(), workspace) for path in args.files
                ]
                written = await asyncio.gather(
                    *(engine.translate_document(document) for document in documents)
                )
                # Tous les documents partagent la même passe
                logger.info(f"✅ Traduction : {written[0] if written else 0} traduction(s) écrite(s)")

            elif args.command == "clean":
                confirm = (lambda keys: True) if args.yes else _confirm_interactive
                removed = await engine.clean_unused_keys(workspace, confirm)
                logger.info(f"✅ Nettoyage : {removed} entrée(s) supprimée(s)")
        finally:
            reporter.close()
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    lock_config()

    config_file = args.config
    if config_file is None:
        default_config = args.workspace / DEFAULT_CONFIG_FILENAME
        config_file = default_config if default_config.exists() else None

    try:
        settings = SyncSettings.load(config_file)
        return asyncio.run(run(args, settings))
    except LocaleSyncError as e:
        logger.error(f"❌ {e}")
        print(f"Erreur : {e}")
        return 1
    except OSError as e:
        logger.error(f"❌ Fichier inaccessible : {e}")
        print(f"Erreur : {e}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
