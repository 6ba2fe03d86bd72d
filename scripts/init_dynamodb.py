import argparse
import logging

from evently import config
from evently.database.dynamodb import create_table_if_not_exists, delete_table


def main():
    parser = argparse.ArgumentParser(description="Create the Evently DynamoDB table")
    parser.add_argument("--table", default=config.TABLE_NAME, help="Table name")
    parser.add_argument(
        "--drop", action="store_true", help="Delete the table first if it exists"
    )
    args = parser.parse_args()

    if args.drop:
        delete_table(args.table)
    create_table_if_not_exists(args.table)


if __name__ == "__main__":
    logging.basicConfig(level=config.LOG_LEVEL)
    main()
