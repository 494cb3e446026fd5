import io
import logging

from luckydraw.db.engine import get_sessionmaker, make_engine
from luckydraw.draw import DrawSession
from luckydraw.models import Base
from luckydraw.workflows import archive_session, save_session_to_file

PRIZES_CSV = """no,name,amount,desc
1,Grand Prize,1,Weekend trip for two
2,Second Prize,2,Noise cancelling headphones
3,Third Prize,5,Coffee voucher
"""

PARTICIPANTS_CSV = """id,name
E001,Alice
E002,Bob
E003,Carol
E004,Dave
E005,Erin
E006,Frank
E007,Grace
E008,Heidi
E009,Ivan
E010,Judy
"""


def main() -> None:
    """Draw every sample prize, then write the session to a file and the database."""
    logging.basicConfig(level=logging.DEBUG)

    draw = DrawSession("dev-session")
    draw.load_prizes_csv(io.StringIO(PRIZES_CSV))
    draw.load_participants_csv(io.StringIO(PARTICIPANTS_CSV))

    # Draw the biggest prize last, as done on stage
    for prize in draw.prizes(descending=True):
        winners = draw.draw(prize.no)
        print(f"{prize.name}: {', '.join(w.name for w in winners)}")

    path = save_session_to_file(draw)
    print("Saved session file:", path)

    engine = make_engine()
    Base.metadata.create_all(engine)
    Session = get_sessionmaker(engine)
    with Session.begin() as session:
        snapshot = archive_session(session, draw)
        print("Archived snapshot:", snapshot.id)


if __name__ == "__main__":
    main()
