"""Bulk domain qualification for a client's link prospects"""

import logging
from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy.orm import Session

from ...domain.enums import QualificationStatus, QUALIFIED_STATUSES
from ...domain.value_objects.domain_name import clean_domain
from ...infrastructure.orm.bulk_analysis_model import BulkAnalysisDomainModel
from ...infrastructure.orm.client_model import TargetPageModel

logger = logging.getLogger(__name__)

QUALIFIED_ANY = "qualified_any"


def _dedupe(values):
    return list(dict.fromkeys(v for v in values if v))


class BulkAnalysisService:

    def __init__(self, db: Session):
        self.db = db

    def _collect_keywords(self, client_id: UUID, target_page_ids: List[UUID],
                          manual_keywords: Optional[str]) -> List[str]:
        if manual_keywords and manual_keywords.strip():
            return _dedupe(k.strip() for k in manual_keywords.split(','))
        if not target_page_ids:
            return []
        pages = self.db.query(TargetPageModel).filter(
            TargetPageModel.client_id == client_id,
            TargetPageModel.id.in_(target_page_ids),
        ).all()
        return _dedupe(k for page in pages for k in page.keyword_list)

    def create_or_update_domains(
        self,
        client_id: UUID,
        domains: List[str],
        target_page_ids: List[UUID],
        user_id: Optional[UUID],
        manual_keywords: Optional[str] = None,
        project_id: Optional[UUID] = None,
    ) -> List[BulkAnalysisDomainModel]:
        keywords = self._collect_keywords(client_id, target_page_ids, manual_keywords)
        page_ids = [str(page_id) for page_id in target_page_ids]
        results = []

        for domain in _dedupe(clean_domain(d) for d in domains):
            existing = self.db.query(BulkAnalysisDomainModel).filter(
                BulkAnalysisDomainModel.client_id == client_id,
                BulkAnalysisDomainModel.domain == domain,
            ).first()

            if existing:
                existing.target_page_ids = page_ids
                existing.keyword_count = len(keywords)
                if project_id:
                    existing.project_id = project_id
                existing.updated_at = datetime.utcnow()
                results.append(existing)
                continue

            model = BulkAnalysisDomainModel(
                client_id=client_id,
                project_id=project_id,
                domain=domain,
                target_page_ids=page_ids,
                keyword_count=len(keywords),
                qualification_status=QualificationStatus.PENDING.value,
                created_by=user_id,
            )
            self.db.add(model)
            results.append(model)

        self.db.commit()
        logger.info("Stored %s bulk analysis domains for client %s", len(results), client_id)
        return results

    def update_qualification_status(
        self,
        domain_id: UUID,
        status: QualificationStatus,
        user_id: UUID,
        notes: Optional[str] = None,
        is_manual: bool = False,
        selected_target_page_id: Optional[UUID] = None,
    ) -> BulkAnalysisDomainModel:
        domain = self.get(domain_id)
        now = datetime.utcnow()

        # A human overriding or confirming an AI verdict is tracked separately
        if is_manual and domain.ai_qualification_reasoning:
            if domain.qualification_status != status.value:
                domain.was_manually_qualified = True
                domain.manually_qualified_by = user_id
                domain.manually_qualified_at = now
            else:
                domain.was_human_verified = True
                domain.human_verified_by = user_id
                domain.human_verified_at = now

        domain.qualification_status = status.value
        domain.checked_by = user_id
        domain.checked_at = now
        if notes is not None:
            domain.notes = notes
        if selected_target_page_id:
            domain.selected_target_page_id = selected_target_page_id
        domain.updated_at = now
        self.db.commit()
        return domain

    def get(self, domain_id: UUID) -> BulkAnalysisDomainModel:
        domain = self.db.get(BulkAnalysisDomainModel, domain_id)
        if not domain:
            raise LookupError("Domain not found")
        return domain

    def qualified_domains(self, client_id: UUID) -> List[BulkAnalysisDomainModel]:
        return self.db.query(BulkAnalysisDomainModel).filter(
            BulkAnalysisDomainModel.client_id == client_id,
            BulkAnalysisDomainModel.qualification_status.in_([s.value for s in QUALIFIED_STATUSES]),
        ).order_by(BulkAnalysisDomainModel.domain).all()

    def existing_domains(self, client_id: UUID, domains: List[str]) -> List[dict]:
        cleaned = _dedupe(clean_domain(d) for d in domains)
        if not cleaned:
            return []
        rows = self.db.query(BulkAnalysisDomainModel).filter(
            BulkAnalysisDomainModel.client_id == client_id,
            BulkAnalysisDomainModel.domain.in_(cleaned),
        ).all()
        return [{"domain": r.domain, "qualification_status": r.qualification_status} for r in rows]

    def delete(self, domain_id: UUID) -> None:
        self.db.delete(self.get(domain_id))
        self.db.commit()

    def search(
        self,
        client_id: UUID,
        qualification_status: Optional[str] = None,
        has_workflow: Optional[bool] = None,
        search: Optional[str] = None,
        project_id: Optional[UUID] = None,
        page: int = 1,
        page_size: int = 50,
    ) -> Tuple[List[BulkAnalysisDomainModel], int]:
        query = self.db.query(BulkAnalysisDomainModel).filter(
            BulkAnalysisDomainModel.client_id == client_id
        )
        if qualification_status == QUALIFIED_ANY:
            query = query.filter(
                BulkAnalysisDomainModel.qualification_status.in_([s.value for s in QUALIFIED_STATUSES])
            )
        elif qualification_status:
            query = query.filter(BulkAnalysisDomainModel.qualification_status == qualification_status)
        if has_workflow is not None:
            query = query.filter(BulkAnalysisDomainModel.has_workflow.is_(has_workflow))
        if search:
            query = query.filter(BulkAnalysisDomainModel.domain.ilike(f"%{search.lower()}%"))
        if project_id:
            query = query.filter(BulkAnalysisDomainModel.project_id == project_id)

        total = query.count()
        items = query.order_by(BulkAnalysisDomainModel.created_at.desc(), BulkAnalysisDomainModel.domain) \
            .offset((page - 1) * page_size).limit(page_size).all()
        return items, total
