#!/usr/bin/env python3
"""
Chat Companion Command Line Interface

Talk to the Markov chat companion from a terminal, or manage its history.

Commands:
    chat                Interactive conversation (empty line, 'quit' or 'exit' to stop)
    reply TEXT          Store TEXT, retrain and print the reply
    export [PATH]       Write the training corpus to a text file
    reset               Delete the conversation history
    import-csv PATH...  Import utterances from the first column of CSV files
"""
import argparse
import logging
import sys

from models.nlps.chat_companion import ChatCompanion
from utils.config.config_loader import load_config
from utils.loggers.json_logger import get_logger

EXIT_COMMANDS = ("quit", "exit")


def build_parser():
    parser = argparse.ArgumentParser(
        prog="markov-companion",
        description="Chat with a POS-biased Markov chain companion")
    parser.add_argument("--env", default="development",
                        help="Configuration environment (default: development)")
    parser.add_argument("--config-dir",
                        help="Directory holding companion*.yaml files (default: <project>/configs)")

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("chat", help="Start an interactive conversation")

    reply_parser = subparsers.add_parser("reply", help="Reply to a single message")
    reply_parser.add_argument("text", nargs="+", help="Message text")

    export_parser = subparsers.add_parser("export", help="Export the training corpus")
    export_parser.add_argument("path", nargs="?",
                               help="Output file (default: history.corpus_export_path)")

    subparsers.add_parser("reset", help="Delete the conversation history")

    import_parser = subparsers.add_parser("import-csv", help="Import utterances from CSV files")
    import_parser.add_argument("paths", nargs="+", help="CSV files")
    import_parser.add_argument("--header", type=int, default=None,
                               help="Header row number (default: no header)")
    return parser


def run_chat(companion, input_func=input, output=None):
    """Reads user lines until EOF, an empty line or an exit command."""
    output = output or sys.stdout
    while True:
        try:
            text = input_func("you> ")
        except EOFError:
            break
        if not text.strip() or text.strip().lower() in EXIT_COMMANDS:
            break
        print(f"bot> {companion.process_user_input(text)}", file=output)


def main(argv=None):
    args = build_parser().parse_args(argv)
    logger_name = f"markov_companion_{args.env}"

    # Config messages go through the same logger before its settings are known
    logger = get_logger(logger_name, console_json=False, console_level=logging.WARNING)
    config = load_config(environment=args.env, config_dir=args.config_dir, logger=logger)

    logging_config = config["logging"]
    logger = get_logger(
        logger_name,
        log_file=logging_config.get("log_file"),
        console_json=logging_config.get("console_json", False),
        console_level=logging.getLevelName(logging_config.get("console_level", "WARNING")),
    )

    try:
        companion = ChatCompanion.from_config(config, logger=logger)

        if args.command == "chat":
            run_chat(companion)
        elif args.command == "reply":
            print(companion.process_user_input(" ".join(args.text)))
        elif args.command == "export":
            path = companion.export_corpus(args.path or config["history"]["corpus_export_path"])
            print(f"Corpus exported to {path}")
        elif args.command == "reset":
            companion.reset_history()
            print("Conversation history cleared.")
        elif args.command == "import-csv":
            total = sum(companion.import_csv(path, header=args.header) for path in args.paths)
            print(f"Imported {total} messages.")
    except (ValueError, OSError) as e:
        logger.error(str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
