import json
import logging
import sqlite3

from app.db import Database, generate_id, utcnow
from app.errors import InvalidDayIndex, NotFound, ProofNotFound
from app.models import Challenge, Proof

logger = logging.getLogger(__name__)

DAY_COUNT = 3


def _row_to_challenge(row: sqlite3.Row) -> Challenge:
    return Challenge(
        id=row["id"],
        user_id=row["user_id"],
        title=row["title"],
        category=row["category"],
        plan=row["plan"],
        days=json.loads(row["days"]),
        current_day=row["current_day"],
        is_complete=bool(row["is_complete"]),
        created_at=row["created_at"],
    )


class ChallengeStore:
    """Challenge records and their proofs.

    Every lookup and update is filtered on ``(id, user_id)``, so a challenge
    owned by someone else is indistinguishable from one that does not exist.
    """

    def __init__(self, db: Database):
        self.db = db

    def _fetch(self, conn: sqlite3.Connection, user_id: str, challenge_id: str) -> Challenge:
        row = conn.execute(
            "SELECT * FROM challenges WHERE id = ? AND user_id = ?",
            (challenge_id, user_id),
        ).fetchone()
        if not row:
            raise NotFound("Challenge not found")
        return _row_to_challenge(row)

    def create(self, user_id: str, title: str, category: str, plan: str) -> Challenge:
        challenge = Challenge(
            id=generate_id(),
            user_id=user_id,
            title=title,
            category=category,
            plan=plan,
            days=[False] * DAY_COUNT,
            current_day=0,
            is_complete=False,
            created_at=utcnow(),
        )
        with self.db.transaction() as conn:
            conn.execute(
                "INSERT INTO challenges (id, user_id, title, category, plan, days, current_day, is_complete, created_at) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    challenge.id,
                    challenge.user_id,
                    challenge.title,
                    challenge.category,
                    challenge.plan,
                    json.dumps(challenge.days),
                    challenge.current_day,
                    int(challenge.is_complete),
                    challenge.created_at,
                ),
            )
        logger.info(f"User {user_id} created challenge {challenge.id}")
        return challenge

    def list_challenges(self, user_id: str, is_complete: bool | None = None) -> list[Challenge]:
        query = "SELECT * FROM challenges WHERE user_id = ?"
        params: list = [user_id]
        if is_complete is not None:
            query += " AND is_complete = ?"
            params.append(int(is_complete))
        query += " ORDER BY rowid"

        with self.db.transaction() as conn:
            rows = conn.execute(query, params).fetchall()
        return [_row_to_challenge(r) for r in rows]

    def get(self, user_id: str, challenge_id: str) -> Challenge:
        with self.db.transaction() as conn:
            return self._fetch(conn, user_id, challenge_id)

    def upload_proof(self, user_id: str, challenge_id: str, day_index: int, image_base64: str) -> dict:
        with self.db.transaction() as conn:
            before = self._fetch(conn, user_id, challenge_id)

            if not 0 <= day_index < DAY_COUNT:
                raise InvalidDayIndex()

            # Set only the one slot so concurrent uploads for other days are not lost
            conn.execute(
                "UPDATE challenges SET days = json_set(days, '$[' || ? || ']', json('true')) "
                "WHERE id = ? AND user_id = ?",
                (day_index, challenge_id, user_id),
            )
            conn.execute(
                "INSERT INTO proofs (challenge_id, day_index, image_base64, uploaded_at) VALUES (?, ?, ?, ?)",
                (challenge_id, day_index, image_base64, utcnow()),
            )
            days = json.loads(
                conn.execute("SELECT days FROM challenges WHERE id = ?", (challenge_id,)).fetchone()["days"]
            )

        logger.info(f"Proof uploaded for challenge {challenge_id} day {day_index}")
        # Uploading never completes a challenge; only complete() does
        return {"days": days, "isCompleted": before.is_complete}

    def reset(self, user_id: str, challenge_id: str) -> dict:
        days = [False] * DAY_COUNT
        with self.db.transaction() as conn:
            cursor = conn.execute(
                "UPDATE challenges SET days = ?, current_day = 0 WHERE id = ? AND user_id = ?",
                (json.dumps(days), challenge_id, user_id),
            )
            if cursor.rowcount == 0:
                raise NotFound("Challenge not found")
        return {"days": days}

    def complete(self, user_id: str, challenge_id: str) -> dict:
        with self.db.transaction() as conn:
            cursor = conn.execute(
                "UPDATE challenges SET is_complete = 1 WHERE id = ? AND user_id = ?",
                (challenge_id, user_id),
            )
            if cursor.rowcount == 0:
                raise NotFound("Challenge not found")
        logger.info(f"Challenge {challenge_id} marked complete")
        return {"isComplete": True}

    def get_proof(self, user_id: str, challenge_id: str, day_index: int) -> Proof:
        with self.db.transaction() as conn:
            self._fetch(conn, user_id, challenge_id)
            if not 0 <= day_index < DAY_COUNT:
                raise ProofNotFound()
            # First stored proof for the day wins when there are duplicates
            row = conn.execute(
                "SELECT challenge_id, day_index, image_base64, uploaded_at FROM proofs "
                "WHERE challenge_id = ? AND day_index = ? ORDER BY id LIMIT 1",
                (challenge_id, day_index),
            ).fetchone()
        if not row:
            raise ProofNotFound()
        return Proof(**dict(row))

    def delete(self, user_id: str, challenge_id: str) -> dict:
        with self.db.transaction() as conn:
            cursor = conn.execute(
                "DELETE FROM challenges WHERE id = ? AND user_id = ?",
                (challenge_id, user_id),
            )
            if cursor.rowcount == 0:
                raise NotFound("Challenge not found")
        logger.info(f"Deleted challenge {challenge_id}")
        return {"message": "Challenge deleted successfully"}
