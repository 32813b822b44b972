import argparse
import dataclasses
import logging
import sys
from typing import List, Optional

from sqlapigen.codegen import write_generated_files
from sqlapigen.colored_logging import (
    log_highlight,
    log_progress,
    log_section,
    log_success,
    setup_colored_logging,
)
from sqlapigen.config_validation import load_config, to_project_config
from sqlapigen.domain.models import SqlSchema
from sqlapigen.domain.relationships import RelationshipAnalyzer
from sqlapigen.exceptions import ConfigurationError, SqlApiGenError
from sqlapigen.generators.registry import GeneratorRegistry, default_registry
from sqlapigen.parser import SqlSchemaParser
from sqlapigen.validators import ConfigValidator, SchemaValidator

logger = logging.getLogger("sqlapigen")


def filter_schema_tables(
    schema: SqlSchema,
    include_tables: Optional[List[str]] = None,
    exclude_tables: Optional[List[str]] = None,
) -> SqlSchema:
    """Copy of ``schema`` restricted to the included tables, minus the excluded ones."""
    include_set = {name.lower() for name in include_tables} if include_tables else None
    exclude_set = {name.lower() for name in exclude_tables} if exclude_tables else set()

    tables = []
    for table in schema.tables:
        name = table.name.lower()
        if name in exclude_set:
            logger.info(f"Excluding table: {table.name}")
            continue
        if include_set is not None and name not in include_set:
            logger.debug(f"Skipping table '{table.name}' (not in include list).")
            continue
        tables.append(table)
    return dataclasses.replace(schema, tables=tables)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sqlapigen",
        description="Generate CRUD API projects for several languages and frameworks from a SQL schema.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose DEBUG logging for the generator tool.",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output (useful for CI/CD environments).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate = subparsers.add_parser("generate", help="Generate a project from a SQL schema file.")
    generate.add_argument("schema_file", metavar="SQL_FILE", help="SQL DDL file to read.")
    generate.add_argument("-c", "--config", help="Path to a YAML configuration file.")
    generate.add_argument("-l", "--language", help="Target language (e.g. java, go, python).")
    generate.add_argument("-f", "--framework", help="Target framework; the language default when omitted.")
    generate.add_argument("-o", "--output-dir", dest="output_dir", help="Directory to generate the project in.")
    generate.add_argument("-n", "--name", dest="project_name", help="Project name.")
    generate.add_argument("-p", "--package", dest="base_package", help="Base package or namespace.")
    generate.add_argument("--features", help="Comma-separated feature list, e.g. crud,pagination,jwt_auth.")
    generate.add_argument("--include-tables", dest="include_tables", nargs="+", help="Only generate these tables.")
    generate.add_argument("--exclude-tables", dest="exclude_tables", nargs="+", help="Skip these tables.")
    generate.add_argument("--language-version", dest="language_version", help="Target language version.")
    generate.add_argument("--framework-version", dest="framework_version", help="Target framework version.")
    generate.add_argument("--api-prefix", dest="api_prefix", help="Path prefix of every API route.")
    generate.add_argument(
        "--overwrite",
        action="store_true",
        default=None,
        help="Replace files that already exist in the output directory.",
    )
    generate.add_argument(
        "--dry-run",
        dest="dry_run",
        action="store_true",
        help="List the files that would be generated without writing them.",
    )

    validate = subparsers.add_parser("validate", help="Parse a SQL schema file and report problems.")
    validate.add_argument("schema_file", metavar="SQL_FILE", help="SQL DDL file to read.")

    subparsers.add_parser("list", help="List the available generators and their features.")
    return parser


def log_schema_summary(schema: SqlSchema, api_prefix: str) -> None:
    """One line per entity: columns, relations and endpoint."""
    analyzer = RelationshipAnalyzer(schema)
    for table in schema.entity_tables:
        if table.primary_key_column is None:
            continue
        relations = (
            len(analyzer.relationships_for(table))
            + len(analyzer.inverse_relationships(table))
            + len(analyzer.many_to_many(table))
        )
        log_highlight(
            logger,
            f"{table.entity_name}: {len(table.columns)} columns, {relations} relations, "
            f"{api_prefix}/{table.kebab_name}",
        )

    functions_by_table = schema.functions_by_table()
    for table_name, functions in functions_by_table.items():
        names = ", ".join(function.name for function in functions)
        logger.info(f"Functions for {table_name}: {names}")


def run_generate(args: argparse.Namespace, registry: GeneratorRegistry) -> int:
    log_progress(logger, "Loading configuration...")
    tool_config = load_config(args.config, args)
    project_config = to_project_config(tool_config)
    logger.debug(f"Effective configuration loaded: {tool_config}")

    generator = registry.resolve(tool_config.language, tool_config.framework)
    log_success(logger, f"Using generator {generator.key} ({generator.display_name})")

    config_result = ConfigValidator.validate_for_generator(project_config, generator)
    for warning in config_result.warnings:
        logger.warning(warning)
    config_result.raise_if_invalid()

    if not args.dry_run:
        output_result = ConfigValidator.validate_output_directory(tool_config.output_dir)
        for warning in output_result.warnings:
            logger.warning(warning)
        if not output_result.is_valid:
            raise ConfigurationError("; ".join(output_result.errors), config_file=args.config)

    log_section(logger, "Schema Parsing")
    schema = SqlSchemaParser().parse_file(tool_config.schema_file)
    filter_result = SchemaValidator.validate_table_filters(
        tool_config.include_tables, tool_config.exclude_tables, [t.name for t in schema.tables]
    )
    for warning in filter_result.warnings:
        logger.warning(warning)
    schema = filter_schema_tables(schema, tool_config.include_tables, tool_config.exclude_tables)

    schema_result = SchemaValidator.validate(schema)
    for warning in schema_result.warnings:
        logger.warning(warning)
    schema_result.raise_if_invalid()
    log_success(logger, f"Parsed {len(schema.tables)} tables and {len(schema.functions)} functions.")

    log_section(logger, "Code Generation")
    log_progress(logger, f"Generating {generator.display_name} project...")
    files = generator.generate(schema, project_config)

    if args.dry_run:
        for path in files:
            print(path)
        log_success(logger, f"{len(files)} files would be generated in {tool_config.output_dir}")
    else:
        result = write_generated_files(files, tool_config.output_dir, overwrite=tool_config.overwrite)
        log_success(logger, f"Wrote {len(result.written)} files to {result.output_dir}")
        if result.skipped:
            logger.warning(f"Skipped {len(result.skipped)} existing files; use --overwrite to replace them.")

    log_schema_summary(schema, project_config.option("api_prefix"))
    return 0


def run_validate(args: argparse.Namespace) -> int:
    schema = SqlSchemaParser().parse_file(args.schema_file)
    result = SchemaValidator.validate(schema)

    logger.info(f"{len(schema.tables)} tables, {len(schema.functions)} functions, {len(schema.entity_tables)} entities")
    for error in schema.parse_errors:
        logger.error(error)
    for warning in result.warnings:
        if not warning.startswith("Parse error:"):
            logger.warning(warning)
    for error in result.errors:
        logger.error(error)

    if result.is_valid and not schema.parse_errors:
        log_success(logger, f"{args.schema_file} is valid.")
        return 0
    return 1


def run_list(registry: GeneratorRegistry) -> int:
    for generator in registry.all_generators():
        features = ", ".join(sorted(feature.value for feature in generator.supported_features))
        print(f"{generator.key:<22} {generator.display_name}")
        print(f"{'':<22} {features}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    log_level = logging.DEBUG if args.verbose else logging.INFO
    setup_colored_logging(level=log_level, use_colors=not args.no_color)
    if args.verbose:
        logger.debug("Verbose mode enabled. DEBUG level logging activated.")

    registry = default_registry()
    try:
        if args.command == "generate":
            return run_generate(args, registry)
        if args.command == "validate":
            return run_validate(args)
        return run_list(registry)
    except SqlApiGenError as e:
        logger.error(str(e), exc_info=args.verbose)
        return 1
    except Exception as e:
        logger.error(f"An unexpected error occurred: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
