"""
Demo content: "Introduction to Cryptocurrency and Blockchain".

Two topics of two subtopics each, two practice questions per subtopic and a
ten-question final test. Used by scripts/seed_demo_lesson.py and the system
tests.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cryptotutor.kernel.models.lesson import (
    FinalTestQuestion,
    Lesson,
    QuizQuestion,
    Resource,
    ResourceType,
    Subtopic,
    Topic,
)
from cryptotutor.logging_config import get_logger

logger = get_logger(__name__)

DEMO_LESSON_TITLE = "Introduction to Cryptocurrency and Blockchain"

_TOPICS = [
    {
        "title": "What Is Cryptocurrency?",
        "subtopics": [
            {
                "title": "Definition and Key Characteristics of Cryptocurrency",
                "objective": "Understand what cryptocurrencies are and their key characteristics compared to traditional money",
                "key_concepts": ["digital assets", "decentralization", "cryptography", "peer-to-peer"],
                "resources": [
                    {
                        "type": ResourceType.LINK.value,
                        "title": "What Is Cryptocurrency?",
                        "url": "https://www.britannica.com/money/what-is-cryptocurrency",
                        "description": "Comprehensive introduction to cryptocurrency fundamentals",
                        "purpose": "overview",
                        "content_tags": ["cryptocurrency", "basics", "introduction"],
                        "recommended_when": "before_lesson",
                        "is_optional": False,
                    },
                    {
                        "type": ResourceType.VIDEO.value,
                        "title": "Cryptocurrency Explained",
                        "url": "https://www.youtube.com/watch?v=1MxM1eTbXb0",
                        "description": "Video explanation of cryptocurrency basics",
                        "purpose": "visual_learning",
                        "content_tags": ["cryptocurrency", "video", "basics"],
                        "recommended_when": "during_lesson",
                        "is_optional": False,
                    },
                ],
                "questions": [
                    (
                        "What makes a cryptocurrency 'decentralized'?",
                        ["It is issued by a central bank", "No single authority controls the network",
                         "It can only be used in one country", "It is stored on one server"],
                        1,
                        "A decentralized currency is maintained by many independent participants rather than one authority.",
                    ),
                    (
                        "Which technology secures cryptocurrency transactions?",
                        ["Cryptography", "Barcodes", "Magnetic stripes", "Paper receipts"],
                        0,
                        "Cryptographic signatures prove ownership and protect transactions from tampering.",
                    ),
                ],
            },
            {
                "title": "Cryptocurrencies vs. Traditional Money",
                "objective": "Compare and contrast cryptocurrencies with traditional fiat money",
                "key_concepts": ["fiat currency", "central banks", "monetary policy", "volatility"],
                "resources": [],
                "questions": [
                    (
                        "Who controls the supply of a fiat currency?",
                        ["Miners", "A central bank or government", "Crypto exchanges", "Wallet providers"],
                        1,
                        "Fiat money supply is managed through a central bank's monetary policy.",
                    ),
                    (
                        "Why are many cryptocurrencies considered volatile?",
                        ["Their prices can change sharply in short periods", "They never change in value",
                         "They are pegged to gold", "They are backed by tax revenue"],
                        0,
                        "Crypto prices are driven by supply, demand and sentiment, and can move quickly.",
                    ),
                ],
            },
        ],
    },
    {
        "title": "Introduction to Blockchain Technology",
        "subtopics": [
            {
                "title": "How a Blockchain Works",
                "objective": "Explain how transactions are grouped into blocks and shared across a network",
                "key_concepts": ["distributed ledger", "nodes", "blocks", "consensus"],
                "resources": [
                    {
                        "type": ResourceType.TEXT.value,
                        "title": "Blockchain in Plain Words",
                        "description": "A short reading on distributed ledgers",
                        "purpose": "overview",
                        "content_tags": ["blockchain", "ledger"],
                        "recommended_when": "during_lesson",
                        "is_optional": True,
                    },
                ],
                "questions": [
                    (
                        "What is a blockchain?",
                        ["A shared ledger of transactions kept by many nodes", "A private spreadsheet",
                         "A type of crypto wallet", "A bank account"],
                        0,
                        "A blockchain is a distributed ledger replicated across the network's nodes.",
                    ),
                    (
                        "What does a node do in a blockchain network?",
                        ["Prints paper money", "Keeps a copy of the ledger and relays transactions",
                         "Sets interest rates", "Issues credit cards"],
                        1,
                        "Nodes store the ledger, validate and relay transactions and blocks.",
                    ),
                ],
            },
            {
                "title": "Blocks, Hashes and Immutability",
                "objective": "Understand how hashing links blocks and makes history hard to change",
                "key_concepts": ["hash", "previous block hash", "immutability", "tamper evidence"],
                "resources": [],
                "questions": [
                    (
                        "What links each block to the one before it?",
                        ["The miner's name", "A timestamp only", "The previous block's hash", "The wallet address"],
                        2,
                        "Each block stores the hash of the previous block, forming a chain.",
                    ),
                    (
                        "Why is it hard to alter an old block?",
                        ["Blocks are encrypted with passwords", "Changing it changes its hash and breaks every later link",
                         "Old blocks are deleted", "Only banks can read old blocks"],
                        1,
                        "Altering data changes the block hash, invalidating all following blocks.",
                    ),
                ],
            },
        ],
    },
]

_FINAL_TEST = [
    ("What is cryptocurrency?", ["A digital asset secured by cryptography", "A paper banknote",
                                 "A credit card", "A stock certificate"], 0),
    ("Which was the first cryptocurrency?", ["Ethereum", "Bitcoin", "Litecoin", "Dogecoin"], 1),
    ("What does 'peer-to-peer' mean for crypto payments?", ["Payments go through a bank",
     "Users transact directly with each other", "Only peers at one company can pay", "Payments need a cheque"], 1),
    ("Fiat currency is issued by...", ["Miners", "Smart contracts", "Governments and central banks", "Wallets"], 2),
    ("What is a stablecoin?", ["A coin that never trades", "A coin designed to track a stable asset such as the US dollar",
     "A coin made of metal", "A coin with no supply limit"], 1),
    ("What is a blockchain?", ["A distributed ledger", "A single database owned by one bank",
                               "An email server", "A hardware wallet"], 0),
    ("What connects blocks in a chain?", ["Signatures of bankers", "Random numbers",
                                          "Each block's reference to the previous block's hash", "Timestamps only"], 2),
    ("What is consensus in a blockchain network?", ["Agreement among nodes on the ledger's state",
     "A vote by shareholders", "A central server's decision", "A user password"], 0),
    ("Which property makes blockchain records hard to change?", ["Volatility", "Immutability", "Liquidity", "Anonymity"], 1),
    ("Who keeps copies of a public blockchain?", ["Only the creator", "Only exchanges",
                                                  "Many independent nodes", "Central banks"], 2),
]


async def seed_demo_lesson(session: AsyncSession) -> Lesson:
    """Insert the demo lesson unless a lesson with the same title exists."""
    existing = await session.execute(select(Lesson).where(Lesson.title == DEMO_LESSON_TITLE))
    lesson = existing.scalars().first()
    if lesson is not None:
        logger.info("Demo lesson already present (id=%s)", lesson.id)
        return lesson

    lesson = Lesson(
        title=DEMO_LESSON_TITLE,
        description=(
            "Fundamental concepts of cryptocurrency and blockchain technology: what "
            "cryptocurrencies are and how a blockchain records transactions."
        ),
        level="beginner",
        language="en",
        icon="bitcoin",
        is_active=True,
    )
    for t_order, topic_data in enumerate(_TOPICS, start=1):
        topic = Topic(title=topic_data["title"], order=t_order)
        for s_order, sub_data in enumerate(topic_data["subtopics"], start=1):
            subtopic = Subtopic(
                title=sub_data["title"],
                objective=sub_data["objective"],
                key_concepts=list(sub_data["key_concepts"]),
                order=s_order,
            )
            subtopic.resources = [Resource(**r) for r in sub_data["resources"]]
            subtopic.quiz_questions = [
                QuizQuestion(question=q, options=list(opts), answer=ans, explanation=expl)
                for q, opts, ans, expl in sub_data["questions"]
            ]
            topic.subtopics.append(subtopic)
        lesson.topics.append(topic)

    lesson.final_test_questions = [
        FinalTestQuestion(question=q, options=list(opts), answer=ans, explanation=None)
        for q, opts, ans in _FINAL_TEST
    ]

    session.add(lesson)
    await session.flush()
    logger.info("Seeded demo lesson %r (id=%s)", lesson.title, lesson.id)
    return lesson
