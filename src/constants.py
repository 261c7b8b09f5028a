DB_FILENAME = "karma_db.sqlite"

# closed_with column value meaning "no closing purpose recorded"
CLOSED_WITH_ABSENT = 0
