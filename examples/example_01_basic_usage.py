"""Example 01: Basic Usage - scalarq Fundamentals.

This example demonstrates the fundamental operations:
- Declaring a collection schema with typed scalar fields
- Inserting rows into partitions
- Querying with filter strings, ids and partition restrictions
- Altering collection properties through AlterCollectionParam
"""

from scalarq import (
    AlterCollectionParam,
    CollectionSchema,
    DataType,
    FieldSchema,
    ScalarqClient,
    field_ref,
)


def main():
    """Run the basic usage example."""
    print("=" * 80)
    print("SCALARQ BASIC USAGE EXAMPLE")
    print("=" * 80)

    # Step 1: Declare a schema
    # Exactly one field is the primary key; VARCHAR fields may cap their length.
    schema = CollectionSchema(
        fields=[
            FieldSchema("book_id", DataType.INT64, is_primary=True),
            FieldSchema("title", DataType.VARCHAR, max_length=128),
            FieldSchema("year", DataType.INT32),
            FieldSchema("in_print", DataType.BOOL),
            FieldSchema("rating", DataType.DOUBLE),
        ]
    )

    client = ScalarqClient()
    client.create_collection("books", schema, description="A small library")
    client.create_partition("books", "classics")
    client.create_alias("books", "library")

    # Step 2: Insert rows
    client.insert(
        "books",
        [
            {"book_id": 1, "title": "Emma", "year": 1815, "in_print": True, "rating": 4.1},
            {"book_id": 2, "title": "Middlemarch", "year": 1871, "in_print": True, "rating": 4.3},
            {"book_id": 3, "title": "Evelina", "year": 1778, "in_print": False, "rating": 3.8},
        ],
        partition_name="classics",
    )
    client.insert(
        "books",
        {"book_id": 10, "title": "Euphoria", "year": 2014, "in_print": True, "rating": 3.9},
    )
    print(f"\nRows: {client.get_collection_stats('books')['row_count']}")

    # Step 3: Query with filter strings
    print("\n--- 1800 < year <= 1900 ---")
    for row in client.query("books", "1800 < year <= 1900", output_fields=["title", "year"]):
        print(f"  {row}")

    print('\n--- title like "E%" and in_print, through the alias ---')
    for row in client.query("library", 'title like "E%" and in_print', output_fields=["*"]):
        print(f"  {row['title']} ({row['year']})")

    print("\n--- ids [1, 3, 10] restricted to the classics partition ---")
    rows = client.query("books", "", ids=[1, 3, 10], partition_names=["classics"])
    print(f"  {rows}")

    print("\n--- count(*) with a programmatic filter ---")
    expr = (field_ref("rating") >= 4.0) | field_ref("year").in_([2014])
    print(f"  {client.query('books', expr, output_fields=['count(*)'])}")

    # Step 4: Alter properties
    param = (
        AlterCollectionParam.new_builder()
        .with_collection_name("books")
        .with_ttl(3600)
        .with_mmap_enabled(False)
        .build()
    )
    client.alter_collection(param)
    print(f"\nProperties: {client.describe_collection('books')['properties']}")


if __name__ == "__main__":
    main()
