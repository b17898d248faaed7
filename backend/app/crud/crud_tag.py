from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from .. import models, schemas
from ..models.tag import TagAssignment, TagCategory
from ..utils.slug import unique_slug_for

POPULAR_SCORE = 5


class CRUDTag:
    def get(self, db: Session, tag_id: int) -> Optional[models.Tag]:
        return db.query(models.Tag).filter(models.Tag.id == tag_id).first()

    def get_by_slug(self, db: Session, slug: str, *, approved_only: bool = True) -> Optional[models.Tag]:
        query = db.query(models.Tag).filter(models.Tag.slug == slug)
        if approved_only:
            query = query.filter(models.Tag.is_approved.is_(True))
        return query.first()

    def get_many_by_slugs(self, db: Session, slugs: List[str]) -> List[models.Tag]:
        return (
            db.query(models.Tag)
            .filter(models.Tag.slug.in_(slugs), models.Tag.is_approved.is_(True))
            .all()
        )

    def list_tags(
        self,
        db: Session,
        *,
        category: Optional[TagCategory] = None,
        featured: Optional[bool] = None,
        popular: bool = False,
        trending: bool = False,
        q: Optional[str] = None,
        limit: int = 100,
    ) -> List[models.Tag]:
        query = db.query(models.Tag).filter(models.Tag.is_approved.is_(True))
        if category is not None:
            query = query.filter(models.Tag.category == category)
        if featured is not None:
            query = query.filter(models.Tag.is_featured.is_(featured))
        if popular:
            query = query.filter(models.Tag.popularity_score > POPULAR_SCORE)
        if trending:
            query = query.filter(models.Tag.is_trending.is_(True))
        if q:
            like = f"%{q.strip()}%"
            query = query.filter(or_(models.Tag.name.ilike(like), models.Tag.description.ilike(like)))
        return (
            query.order_by(
                models.Tag.display_order,
                models.Tag.popularity_score.desc(),
                models.Tag.name,
            )
            .limit(limit)
            .all()
        )

    def create(
        self,
        db: Session,
        tag_in: schemas.TagCreate,
        created_by: Optional[int] = None,
        *,
        requires_approval: bool = False,
    ) -> models.Tag:
        data = tag_in.model_dump()
        level = 0
        if tag_in.parent_tag_id is not None:
            parent = self.get(db, tag_in.parent_tag_id)
            if parent is None:
                raise ValueError("Parent tag not found")
            level = (parent.level or 0) + 1
        db_tag = models.Tag(
            **data,
            slug=unique_slug_for(db, models.Tag, tag_in.name, fallback="tag"),
            level=level,
            created_by=created_by,
            requires_approval=requires_approval,
            is_approved=not requires_approval,
        )
        db.add(db_tag)
        db.commit()
        db.refresh(db_tag)
        return db_tag

    def approve(self, db: Session, db_tag: models.Tag, approved_by: Optional[int] = None) -> models.Tag:
        db_tag.approve(approved_by)
        db.commit()
        db.refresh(db_tag)
        return db_tag

    def set_translation(
        self,
        db: Session,
        db_tag: models.Tag,
        locale: str,
        name: str,
        description: Optional[str] = None,
    ) -> models.Tag:
        db_tag.set_translation(locale, name, description)
        db.commit()
        db.refresh(db_tag)
        return db_tag

    def attach_to_tattoo(
        self,
        db: Session,
        db_tag: models.Tag,
        db_tattoo: models.Tattoo,
        relevance_score: float = 1.0,
        is_primary: bool = False,
        assignment_type: TagAssignment = TagAssignment.MANUAL,
        *,
        commit: bool = True,
    ) -> models.TattooTag:
        """Link a tag to a tattoo; usage is only counted for new links."""
        link = (
            db.query(models.TattooTag)
            .filter(models.TattooTag.tag_id == db_tag.id, models.TattooTag.tattoo_id == db_tattoo.id)
            .first()
        )
        if link is None:
            link = models.TattooTag(
                tag_id=db_tag.id,
                tattoo_id=db_tattoo.id,
                relevance_score=relevance_score,
                is_primary=is_primary,
                assignment_type=assignment_type,
            )
            db.add(link)
            db_tag.increment_usage()
        elif is_primary and not link.is_primary:
            link.is_primary = True
        if commit:
            db.commit()
            db.refresh(link)
        return link


tag = CRUDTag()
