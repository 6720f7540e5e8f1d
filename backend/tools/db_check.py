import json
import sqlite3
import sys

DB = sys.argv[1] if len(sys.argv) > 1 else "dev.db"
PRODUCT_ID = sys.argv[2] if len(sys.argv) > 2 else None
LEVEL = sys.argv[3] if len(sys.argv) > 3 else None

conn = sqlite3.connect(DB)
cur = conn.cursor()

print("=== Products ===")
cur.execute(
    "SELECT id, name, price, original_price, stock_quantity, is_active FROM products ORDER BY id LIMIT 50"
)
for r in cur.fetchall():
    print(r)

if PRODUCT_ID:
    print(f"\n=== Sizes for product={PRODUCT_ID} ===")
    cur.execute(
        "SELECT id, size, stock_quantity, is_active, updated_at FROM product_sizes WHERE product_id=? ORDER BY id",
        (PRODUCT_ID,),
    )
    for r in cur.fetchall():
        print(r)

    print(f"\n=== Categories for product={PRODUCT_ID} ===")
    cur.execute(
        "SELECT c.id, c.name, c.slug FROM categories c "
        "JOIN product_categories pc ON pc.category_id = c.id WHERE pc.product_id=? ORDER BY c.name",
        (PRODUCT_ID,),
    )
    for r in cur.fetchall():
        print(r)

print("\n=== Recent system logs ===")
if LEVEL:
    cur.execute(
        "SELECT id, level, message, context, user_name, metadata, created_at FROM system_logs WHERE level=? ORDER BY created_at DESC LIMIT 20",
        (LEVEL,),
    )
else:
    cur.execute(
        "SELECT id, level, message, context, user_name, metadata, created_at FROM system_logs ORDER BY created_at DESC LIMIT 20"
    )
for r in cur.fetchall():
    meta = r[5]
    try:
        meta = json.loads(meta) if isinstance(meta, str) else meta
    except ValueError:
        pass
    print(
        {
            "id": r[0],
            "level": r[1],
            "message": r[2],
            "context": r[3],
            "user_name": r[4],
            "metadata": meta,
            "created_at": r[6],
        }
    )

conn.close()
