"""Example usage of the tablescope library."""

from datetime import datetime, timezone
from pathlib import Path

from tablescope import DatabaseHandle, SortSpec, count_rows, display_text, list_columns, scan_rows
from tablescope.store import Database

# Define the tables using the schema DSL
schema = """
table Pet {
    name: string
}

table Person {
    id: int
    name: string?
    score: double
    born: date?
    best_friend: Person
    pets: Pet[]
    nicknames: string[]?
}
"""

# Create a data directory for storage
data_dir = Path("./example_db")

with Database.create(data_dir, schema) as db:
    rex = db.insert("Pet", {"name": "Rex"})
    tom = db.insert("Pet", {"name": "Tom"})

    people = [
        {"id": 3, "name": "Alice", "score": 9.5, "pets": [rex, tom]},
        {"id": 1, "name": None, "score": float("nan"), "best_friend": 0},
        {"id": 2, "name": "Charlie", "score": float("inf"), "nicknames": ["Chaz", "C"]},
        {"id": 4, "name": "Diana", "score": 7.25,
         "born": datetime(1990, 5, 17, 8, 30, tzinfo=timezone.utc)},
    ]
    print("Creating Person rows...")
    for person in people:
        print(f"  Created row {db.insert('Person', person)}")

handle = DatabaseHandle(data_dir)
columns = list_columns(handle, "Person")

print(f"\nPerson has {count_rows(handle, 'Person')} rows:")
print("  " + " | ".join(c.name for c in columns))
for row in scan_rows(handle, "Person", 0, 10, SortSpec("id")):
    print(f"  [{row.position}] " + " | ".join(display_text(cell) for cell in row.cells))

print("\nSecond page of two, highest score first:")
for row in scan_rows(handle, "Person", 2, 2, SortSpec.parse("-score")):
    print(f"  [{row.position}] " + " | ".join(display_text(cell) for cell in row.cells))

print("\n" + "=" * 60)
print("You can now browse this data with the dump tool:")
print(f"  tablescope {data_dir}")
print(f"  tablescope {data_dir} Person --schema")
print(f"  tablescope {data_dir} Person --sort=-score -n 2")
print(f"  tablescope {data_dir} Person --json")
