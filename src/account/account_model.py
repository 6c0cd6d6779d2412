from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from rich import print

class AdminSession(BaseModel):
    user_id: str
    email: Optional[str] = None
    session_token: str
    expires_at: Optional[datetime] = None


def main():
    session = AdminSession(
        user_id='user-test-12345',
        email='admin@example.com',
        session_token='session-token'
    )
    print(session.model_dump())


if __name__ == '__main__':
    main()
